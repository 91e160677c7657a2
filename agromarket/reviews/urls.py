from django.urls import path
from .views import review_list_create, review_detail, product_review_summary

urlpatterns = [
    path('reviews/', review_list_create, name='review-list-create'),
    path('reviews/product/<int:product_id>/summary/', product_review_summary, name='product-review-summary'),
    path('reviews/<int:pk>/', review_detail, name='review-detail'),
]
