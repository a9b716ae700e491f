from rest_framework import status
from rest_framework.views import APIView
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from django.db.models import Count, Q

# Import models from their respective apps to aggregate data
from catalog_app.families import BUSINESS, TOURISM
from core.exceptions import store_errors
from reviews_app.ratings import summarize_ratings, visible_reviews
from user_auth_app.models import UserProfile


class BaseInfoView(APIView):
    """
    Provides a public, read-only endpoint for platform-wide statistics.

    It aggregates data from the catalog, the reviews and the user profiles to
    present a high-level overview for the landing page. Only what a visitor
    could see anyway is counted: published listings and visible reviews.

    Endpoint:
        GET /api/base-info/
    """
    permission_classes = [AllowAny]

    def get(self, request, format=None):
        """
        Returns the platform's key statistics.

        `average_rating` is `null` while there are no reviews at all, and is
        rounded the same way as every other rating summary otherwise.
        """
        with store_errors('base info'):
            ratings = list(visible_reviews().values_list('rating', flat=True))
            business_count = BUSINESS.model.objects.filter(status=BUSINESS.published_status).count()
            tourism_place_count = TOURISM.model.objects.filter(status=TOURISM.published_status).count()
            business_owner_count = UserProfile.objects.filter(role=UserProfile.Role.BUSINESS_OWNER).count()

        summary = summarize_ratings(ratings)
        data = {
            'review_count': summary.total_reviews,
            'average_rating': summary.average_rating if summary.total_reviews else None,
            'business_count': business_count,
            'tourism_place_count': tourism_place_count,
            'business_owner_count': business_owner_count,
        }
        return Response(data, status=status.HTTP_200_OK)


class OwnerStatsView(APIView):
    """
    Dashboard numbers for the businesses of the authenticated user.

    Endpoint:
        GET /api/owner-stats/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, format=None):
        owner_id = request.user.id
        with store_errors('owner stats'):
            counts = BUSINESS.model.objects.filter(owner_id=owner_id).aggregate(
                total=Count('id'),
                published=Count('id', filter=Q(status=BUSINESS.model.Status.PUBLISHED)),
                pending=Count('id', filter=Q(status=BUSINESS.model.Status.PENDING)),
            )
            ratings = list(
                visible_reviews().filter(business__owner_id=owner_id).values_list('rating', flat=True)
            )

        summary = summarize_ratings(ratings)
        data = {
            'total_businesses': counts['total'],
            'published_businesses': counts['published'],
            'pending_businesses': counts['pending'],
            'total_reviews': summary.total_reviews,
            'average_rating': summary.average_rating,
        }
        return Response(data, status=status.HTTP_200_OK)
