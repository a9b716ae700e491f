import django_filters
from ..models import Area, Category, City


class CityFilter(django_filters.FilterSet):
    """Narrows the city picker down to one state."""
    state = django_filters.CharFilter(lookup_expr='iexact')

    class Meta:
        model = City
        fields = ['state']


class AreaFilter(django_filters.FilterSet):
    """
    A FilterSet for areas. Exposes the city as 'city_id' for API clarity,
    e.g. `/api/areas/?city_id=4`.
    """
    city_id = django_filters.NumberFilter(field_name="city__id")

    class Meta:
        model = Area
        fields = ['city_id']


class CategoryFilter(django_filters.FilterSet):
    # 'business' or 'tourism'
    feature_type = django_filters.ChoiceFilter(choices=Category.FeatureType.choices)

    class Meta:
        model = Category
        fields = ['feature_type']
