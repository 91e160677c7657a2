from django.urls import path
from .views import (
    order_list_create, order_user_list, order_detail, order_status_update,
    order_cancel, order_total_amount,
)

urlpatterns = [
    path('orders/', order_list_create, name='order-list-create'),
    path('orders/total-amount/', order_total_amount, name='order-total-amount'),
    path('orders/user/<int:user_id>/', order_user_list, name='order-user-list'),
    path('orders/<int:pk>/', order_detail, name='order-detail'),
    path('orders/<int:pk>/status/', order_status_update, name='order-status-update'),
    path('orders/<int:pk>/cancel/', order_cancel, name='order-cancel'),
]
