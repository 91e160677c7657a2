from django.test import TestCase
from rest_framework import status
from agromarket.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from agromarket.reviews.models import Review


class ReviewAPITests(TestCase):

    def setUp(self):
        self.customer = TestDataFactory.create_user()
        self.other_customer = TestDataFactory.create_user()
        self.product = TestDataFactory.create_product(name='Mangoes')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.customer)

    def test_create_review(self):
        response = self.client.post('/api/v1/reviews/', {
            'product': self.product.id,
            'rating': 5,
            'comment': 'Very sweet',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['username'], self.customer.username)
        self.assertEqual(response.data['product_name'], 'Mangoes')

    def test_one_review_per_product(self):
        Review.objects.create(product=self.product, user=self.customer, rating=4)
        response = self.client.post('/api/v1/reviews/', {'product': self.product.id, 'rating': 2}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('product', response.data)

    def test_rating_out_of_range(self):
        response = self.client.post('/api/v1/reviews/', {'product': self.product.id, 'rating': 6}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('rating', response.data)

    def test_list_filtered_by_product(self):
        other_product = TestDataFactory.create_product()
        Review.objects.create(product=self.product, user=self.customer, rating=4)
        Review.objects.create(product=other_product, user=self.customer, rating=3)
        response = self.client.get('/api/v1/reviews/', {'product': self.product.id})
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['product'], self.product.id)

    def test_only_author_edits(self):
        review = Review.objects.create(product=self.product, user=self.other_customer, rating=4)
        response = self.client.patch(f'/api/v1/reviews/{review.id}/', {'rating': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(self.other_customer)
        response = self.client.patch(f'/api/v1/reviews/{review.id}/', {'rating': 2}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['rating'], 2)

    def test_summary(self):
        Review.objects.create(product=self.product, user=self.customer, rating=4)
        Review.objects.create(product=self.product, user=self.other_customer, rating=5)
        response = self.client.get(f'/api/v1/reviews/product/{self.product.id}/summary/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)
        self.assertEqual(response.data['average_rating'], 4.5)

    def test_summary_without_reviews(self):
        response = self.client.get(f'/api/v1/reviews/product/{self.product.id}/summary/')
        self.assertEqual(response.data, {'product': self.product.id, 'count': 0, 'average_rating': None})
