from django.urls import path
from .views import ticket_list_create, ticket_detail, ticket_reply

urlpatterns = []

for prefix in ('support', 'farmer-support'):
    urlpatterns += [
        path(f'{prefix}/', ticket_list_create, {'ticket_type': prefix}, name=f'{prefix}-list-create'),
        path(f'{prefix}/reply/<int:pk>/', ticket_reply, {'ticket_type': prefix}, name=f'{prefix}-reply'),
        path(f'{prefix}/<int:pk>/', ticket_detail, {'ticket_type': prefix}, name=f'{prefix}-detail'),
    ]
