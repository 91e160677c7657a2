"""
URL configuration for the agromarket project.

Every app contributes its routes under ``api/v1/``; uploaded media is served
from ``media/``.
"""
from django.contrib import admin
from django.urls import path, include, re_path
from django.conf import settings
from django.views.static import serve

admin.site.site_header = "AgroMarket Admin Panel"
admin.site.site_title = "AgroMarket Admin Portal"
admin.site.index_title = "Welcome to the AgroMarket Admin Portal"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('agromarket.core.urls')),
    path('api/v1/', include('agromarket.catalog.urls')),
    path('api/v1/', include('agromarket.orders.urls')),
    path('api/v1/', include('agromarket.deliveries.urls')),
    path('api/v1/', include('agromarket.inventory.urls')),
    path('api/v1/', include('agromarket.suppliers.urls')),
    path('api/v1/', include('agromarket.support.urls')),
    path('api/v1/', include('agromarket.reviews.urls')),
    path('api/v1/', include('agromarket.reports.urls')),
    re_path(r'^media/(?P<path>.*)$', serve, {'document_root': settings.MEDIA_ROOT}),
]
