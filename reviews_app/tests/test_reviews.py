from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from catalog_app.tests.helpers import make_business, make_place, make_review, make_user
from reviews_app.models import Review, ReviewReply
from user_auth_app.models import UserProfile


# ====================================================================
# CLASS 1: Reading reviews
# ====================================================================
class ReviewListAPITests(APITestCase):
    """
    Test suite for the public read endpoints of the review API.
    """

    def setUp(self):
        self.owner = make_user('owner', role=UserProfile.Role.BUSINESS_OWNER)
        self.reviewer1 = make_user('reviewer1', full_name='Riya Mehta')
        self.reviewer2 = make_user('reviewer2')
        self.business = make_business(self.owner, 'Lake View Cafe')
        self.place = make_place(self.owner, 'City Palace')

        self.review1 = make_review(self.reviewer1, 5, business=self.business)
        self.review2 = make_review(self.reviewer2, 3, business=self.business)
        self.review3 = make_review(self.reviewer1, 4, tourism_place=self.place)
        self.deleted = make_review(self.reviewer2, 1, tourism_place=self.place, is_deleted=True)

    def test_anonymous_user_can_list_reviews(self):
        response = self.client.get(reverse('review-list'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        # The soft-deleted review never shows up.
        self.assertEqual(len(response.data), 3)

    def test_filter_by_business(self):
        response = self.client.get(reverse('review-list'), {'business_id': self.business.pk})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual({r['id'] for r in response.data}, {self.review1.pk, self.review2.pk})

    def test_filter_by_author_and_rating(self):
        response = self.client.get(reverse('review-list'), {'user_id': self.reviewer1.pk, 'min_rating': 5})

        self.assertEqual([r['id'] for r in response.data], [self.review1.pk])
        self.assertEqual(response.data[0]['user_name'], 'Riya Mehta')

    def test_deleted_review_is_not_found(self):
        response = self.client.get(reverse('review-detail', kwargs={'pk': self.deleted.pk}))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


# ====================================================================
# CLASS 2: Writing reviews
# ====================================================================
class ReviewWriteAPITests(APITestCase):
    """
    Test suite for submitting, editing, deleting and replying through the API.
    """

    def setUp(self):
        self.owner = make_user('owner', role=UserProfile.Role.BUSINESS_OWNER)
        self.reviewer = make_user('reviewer')
        self.other = make_user('other')
        self.business = make_business(self.owner, 'Lake View Cafe')
        self.url = reverse('review-list')
        self.payload = {
            'family': 'business',
            'entity_id': self.business.pk,
            'rating': 4,
            'title': 'Cosy',
            'content': 'Lovely spot by the lake.',
        }

    def test_unauthenticated_user_cannot_submit(self):
        response = self.client.post(self.url, self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_submit_review(self):
        self.client.force_authenticate(user=self.reviewer)
        self.payload['image_urls'] = ['https://cdn.example.com/1.jpg', 'broken']

        response = self.client.post(self.url, self.payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['user'], self.reviewer.pk)
        self.assertEqual(response.data['business'], self.business.pk)
        self.assertEqual(response.data['status'], 'published')
        self.assertEqual(response.data['images'], ['https://cdn.example.com/1.jpg'])
        self.assertEqual(len(response.data['warnings']), 1)

    def test_duplicate_review_is_a_conflict(self):
        self.client.force_authenticate(user=self.reviewer)
        self.client.post(self.url, self.payload, format='json')

        response = self.client.post(self.url, self.payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(Review.objects.count(), 1)

    def test_out_of_range_rating_is_a_bad_request(self):
        self.client.force_authenticate(user=self.reviewer)
        self.payload['rating'] = 6

        response = self.client.post(self.url, self.payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_entity_is_not_found(self):
        self.client.force_authenticate(user=self.reviewer)
        self.payload['entity_id'] = 9999

        response = self.client.post(self.url, self.payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_author_can_edit_twice(self):
        review = make_review(self.reviewer, 2, business=self.business)
        url = reverse('review-detail', kwargs={'pk': review.pk})
        self.client.force_authenticate(user=self.reviewer)

        first = self.client.patch(url, {'rating': 3}, format='json')
        second = self.client.patch(url, {'content': 'Changed my mind.'}, format='json')
        third = self.client.patch(url, {'rating': 5}, format='json')

        self.assertEqual(first.status_code, status.HTTP_200_OK)
        self.assertEqual(first.data['rating'], 3)
        self.assertEqual(second.data['content'], 'Changed my mind.')
        self.assertEqual(second.data['rating'], 3)
        self.assertEqual(second.data['edit_count'], 2)
        self.assertEqual(third.status_code, status.HTTP_409_CONFLICT)

    def test_other_user_cannot_edit(self):
        review = make_review(self.reviewer, 2, business=self.business)
        self.client.force_authenticate(user=self.other)

        response = self.client.patch(reverse('review-detail', kwargs={'pk': review.pk}), {'rating': 5}, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete_hides_review(self):
        review = make_review(self.reviewer, 2, business=self.business)
        url = reverse('review-detail', kwargs={'pk': review.pk})
        self.client.force_authenticate(user=self.reviewer)

        response = self.client.delete(url)

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertTrue(Review.objects.get(pk=review.pk).is_deleted)
        self.assertEqual(self.client.get(url).status_code, status.HTTP_404_NOT_FOUND)

    def test_owner_replies_once(self):
        review = make_review(self.reviewer, 4, business=self.business)
        url = reverse('review-reply', kwargs={'pk': review.pk})
        self.client.force_authenticate(user=self.owner)

        first = self.client.post(url, {'content': 'Thank you!'}, format='json')
        second = self.client.post(url, {'content': 'Thanks again!'}, format='json')

        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        self.assertEqual(first.data['content'], 'Thank you!')
        self.assertEqual(second.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(ReviewReply.objects.count(), 1)

        detail = self.client.get(reverse('review-detail', kwargs={'pk': review.pk}))
        self.assertEqual(detail.data['reply']['content'], 'Thank you!')

    def test_non_owner_cannot_reply(self):
        review = make_review(self.reviewer, 4, business=self.business)
        self.client.force_authenticate(user=self.other)

        response = self.client.post(reverse('review-reply', kwargs={'pk': review.pk}), {'content': 'Hi'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_edit_status(self):
        review = make_review(self.reviewer, 4, business=self.business, edit_count=1)
        url = reverse('review-edit-status', kwargs={'pk': review.pk})
        self.client.force_authenticate(user=self.reviewer)

        response = self.client.get(url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'can_edit': True, 'edit_count': 1, 'edit_limit': 2})
