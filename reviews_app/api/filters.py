import django_filters
from ..models import Review


class ReviewFilter(django_filters.FilterSet):
    """
    A FilterSet for the review list endpoint.

    Every parameter narrows the list of visible reviews; combining them is
    possible, e.g. `?business_id=3&rating=5`.
    """
    # The reviewed entity, one parameter per catalog family.
    business_id = django_filters.NumberFilter(field_name="business__id")
    tourism_place_id = django_filters.NumberFilter(field_name="tourism_place__id")

    # Exposes the author as 'user_id' for API clarity
    user_id = django_filters.NumberFilter(field_name="user__id")

    min_rating = django_filters.NumberFilter(field_name="rating", lookup_expr='gte')

    class Meta:
        model = Review
        fields = ['business_id', 'tourism_place_id', 'user_id', 'rating', 'min_rating']
