import logging
from django.db.models import Avg, Count
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from .models import Review
from .serializers import ReviewSerializer
from agromarket.catalog.models import Product
from agromarket.core.permissions import is_admin_user

logger = logging.getLogger('agromarket.reviews')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def review_list_create(request):
    """List reviews (optionally for one product) or review a product"""
    if request.method == 'GET':
        queryset = Review.objects.select_related('user', 'product')
        product_id = request.query_params.get('product')
        if product_id:
            if not product_id.isdigit():
                return Response({'error': 'product must be a numeric id'}, status=status.HTTP_400_BAD_REQUEST)
            queryset = queryset.filter(product_id=int(product_id))
        serializer = ReviewSerializer(queryset, many=True)
        return Response(serializer.data)

    serializer = ReviewSerializer(data=request.data, context={'request': request})
    if serializer.is_valid():
        review = serializer.save(user=request.user)
        logger.info(f"Review {review.id} ({review.rating}/5) for product {review.product_id} by {request.user.username}")
        return Response(ReviewSerializer(review).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def review_detail(request, pk):
    """Retrieve, edit or delete a review (author or admin)"""
    review = get_object_or_404(Review.objects.select_related('user', 'product'), pk=pk)

    if request.method == 'GET':
        return Response(ReviewSerializer(review).data)

    if review.user_id != request.user.id and not is_admin_user(request.user):
        return Response({'error': 'You can only modify your own reviews'}, status=status.HTTP_403_FORBIDDEN)

    if request.method == 'PATCH':
        # Product of an existing review cannot change
        data = request.data.copy()
        data.pop('product', None)
        serializer = ReviewSerializer(review, data=data, partial=True, context={'request': request})
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        logger.info(f"User {request.user.username} deleting review {pk}")
        review.delete()
        return Response({'message': 'Review deleted successfully'}, status=status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_review_summary(request, product_id):
    """Review count and average rating for a product"""
    product = get_object_or_404(Product, pk=product_id)
    summary = Review.objects.filter(product=product).aggregate(count=Count('id'), average=Avg('rating'))
    average = summary['average']
    return Response({
        'product': product.id,
        'count': summary['count'],
        'average_rating': round(float(average), 1) if average is not None else None,
    })
