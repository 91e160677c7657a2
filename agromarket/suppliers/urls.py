from django.urls import path
from .views import supplier_list_create, supplier_detail, supplier_record_delivery

urlpatterns = [
    path('suppliers/', supplier_list_create, name='supplier-list-create'),
    path('suppliers/<int:pk>/', supplier_detail, name='supplier-detail'),
    path('suppliers/<int:pk>/deliveries/', supplier_record_delivery, name='supplier-record-delivery'),
]
