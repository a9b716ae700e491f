from django.test import TestCase

from catalog_app.families import BUSINESS, TOURISM
from catalog_app.tests.helpers import make_business, make_place, make_review, make_user
from reviews_app.models import Review
from reviews_app.ratings import (
    RatingSummary,
    get_rating_summary,
    rating_summaries,
    summarize_ratings,
)


class SummarizeRatingsTests(TestCase):
    """The pure aggregation function."""

    def test_empty_list_gives_zero_summary(self):
        summary = summarize_ratings([])

        self.assertEqual(summary, RatingSummary())
        self.assertEqual(summary.total_reviews, 0)
        self.assertEqual(summary.average_rating, 0)
        self.assertEqual(summary.rating_distribution, {1: 0, 2: 0, 3: 0, 4: 0, 5: 0})

    def test_counts_average_and_distribution(self):
        summary = summarize_ratings([5, 4, 4, 1])

        self.assertEqual(summary.total_reviews, 4)
        self.assertEqual(summary.average_rating, 3.5)
        self.assertEqual(summary.rating_distribution, {1: 1, 2: 0, 3: 0, 4: 2, 5: 1})

    def test_distribution_always_adds_up_to_total(self):
        ratings = [1, 2, 2, 3, 5, 5, 5]
        summary = summarize_ratings(ratings)
        self.assertEqual(sum(summary.rating_distribution.values()), summary.total_reviews)

    def test_average_rounds_half_up(self):
        # 13 x 5 + 7 x 4 = 93 over 20 reviews = 4.65
        self.assertEqual(summarize_ratings([5] * 13 + [4] * 7).average_rating, 4.7)
        # 9 / 4 = 2.25
        self.assertEqual(summarize_ratings([3, 2, 2, 2]).average_rating, 2.3)
        # 11 / 3 = 3.666...
        self.assertEqual(summarize_ratings([4, 4, 3]).average_rating, 3.7)

    def test_out_of_range_rating_is_an_error(self):
        with self.assertRaises(ValueError):
            summarize_ratings([5, 0])
        with self.assertRaises(ValueError):
            summarize_ratings([6])


class StoredRatingSummaryTests(TestCase):
    """Summaries read from the database only count visible reviews."""

    def setUp(self):
        self.owner = make_user('owner')
        self.business = make_business(self.owner, 'Lake View Cafe')
        self.other_business = make_business(self.owner, 'Old Town Bakery')
        self.place = make_place(self.owner, 'City Palace')
        self.users = [make_user(f'reviewer{i}') for i in range(4)]

    def test_deleted_and_unpublished_reviews_are_ignored(self):
        make_review(self.users[0], 5, business=self.business)
        make_review(self.users[1], 4, business=self.business)
        make_review(self.users[2], 1, business=self.business, is_deleted=True)
        make_review(self.users[3], 1, business=self.business, status=Review.Status.PENDING)

        summary = get_rating_summary(BUSINESS, self.business.pk)

        self.assertEqual(summary.total_reviews, 2)
        self.assertEqual(summary.average_rating, 4.5)
        self.assertEqual(summary.rating_distribution[1], 0)

    def test_summary_is_scoped_to_family_and_entity(self):
        make_review(self.users[0], 2, business=self.business)
        make_review(self.users[0], 5, tourism_place=self.place)

        self.assertEqual(get_rating_summary(TOURISM, self.place.pk).average_rating, 5.0)
        self.assertEqual(get_rating_summary(BUSINESS, self.business.pk).average_rating, 2.0)

    def test_summary_reflects_latest_state(self):
        review = make_review(self.users[0], 2, business=self.business)
        self.assertEqual(get_rating_summary(BUSINESS, self.business.pk).total_reviews, 1)

        Review.objects.filter(pk=review.pk).update(is_deleted=True)

        self.assertEqual(get_rating_summary(BUSINESS, self.business.pk).total_reviews, 0)

    def test_bulk_summaries_include_entities_without_reviews(self):
        make_review(self.users[0], 3, business=self.business)

        summaries = rating_summaries(BUSINESS, [self.business.pk, self.other_business.pk])

        self.assertEqual(summaries[self.business.pk].total_reviews, 1)
        self.assertEqual(summaries[self.other_business.pk], RatingSummary())
