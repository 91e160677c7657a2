from django.urls import path
from .views import delivery_list_create, delivery_metrics, delivery_detail, delivery_status_update

urlpatterns = [
    path('deliveries/', delivery_list_create, name='delivery-list-create'),
    path('deliveries/metrics/', delivery_metrics, name='delivery-metrics'),
    path('deliveries/<int:pk>/', delivery_detail, name='delivery-detail'),
    path('deliveries/<int:pk>/status/', delivery_status_update, name='delivery-status-update'),
]
