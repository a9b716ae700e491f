from dataclasses import asdict

from django.conf import settings
from rest_framework import serializers

from catalog_app.models import Area, Business, Category, City, TourismImage, TourismPlace
from catalog_app.query import STATUS_ALL, CatalogFilters, SortOrder


class CitySerializer(serializers.ModelSerializer):
    class Meta:
        model = City
        fields = ['id', 'name', 'slug', 'state']


class AreaSerializer(serializers.ModelSerializer):
    class Meta:
        model = Area
        fields = ['id', 'city', 'name', 'slug', 'description']


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ['id', 'name', 'slug', 'description', 'feature_type', 'sort_order']


class CatalogQuerySerializer(serializers.Serializer):
    """
    Translates the query string of a catalog listing into engine arguments.

    Only the shape is checked here; status values, both category parameters
    at once and page numbers below 1 are rejected by the query engine itself.
    """
    status = serializers.CharField(required=False, default=STATUS_ALL)
    search = serializers.CharField(required=False, default='', allow_blank=True)
    city_id = serializers.IntegerField(required=False)
    area_id = serializers.IntegerField(required=False)
    category_id = serializers.IntegerField(required=False)
    category_slug = serializers.CharField(required=False, default='', allow_blank=True)
    owner_id = serializers.IntegerField(required=False)
    featured = serializers.BooleanField(required=False, allow_null=True, default=None)
    verified = serializers.BooleanField(required=False, allow_null=True, default=None)
    sort = serializers.ChoiceField(choices=SortOrder.choices, required=False, default=SortOrder.NEWEST)
    page = serializers.IntegerField(required=False, default=1)
    page_size = serializers.IntegerField(required=False, min_value=1, max_value=100)

    def to_filters(self):
        data = self.validated_data
        return CatalogFilters(
            status=data['status'],
            search=data['search'],
            city_id=data.get('city_id'),
            area_id=data.get('area_id'),
            category_id=data.get('category_id'),
            category_slug=data['category_slug'],
            owner_id=data.get('owner_id'),
            featured=data['featured'],
            verified=data['verified'],
        )

    @property
    def resolved_page_size(self):
        return self.validated_data.get('page_size') or settings.CATALOG_PAGE_SIZE


class CatalogEntitySerializer(serializers.ModelSerializer):
    """
    Read representation shared by both entity families.

    The `*_name` fields and the rating summary are attached by the query
    engine's enrichment step, so only enriched entities can be serialized.
    """
    city_name = serializers.ReadOnlyField()
    area_name = serializers.ReadOnlyField()
    category_names = serializers.ReadOnlyField()
    creator_name = serializers.ReadOnlyField()
    rating_summary = serializers.SerializerMethodField()

    common_fields = [
        'id', 'name', 'slug', 'description', 'address',
        'city', 'city_name', 'area', 'area_name', 'category_names',
        'creator_name', 'status', 'is_featured', 'is_verified',
        'rating_summary', 'created_at', 'updated_at', 'published_at',
    ]

    def get_rating_summary(self, obj):
        return asdict(obj.rating_summary)


class BusinessSerializer(CatalogEntitySerializer):
    class Meta:
        model = Business
        fields = CatalogEntitySerializer.common_fields + ['owner', 'phone', 'email', 'website']


class TourismPlaceSerializer(CatalogEntitySerializer):
    class Meta:
        model = TourismPlace
        fields = CatalogEntitySerializer.common_fields + [
            'created_by', 'category', 'short_description', 'entry_fee',
            'timings', 'best_time_to_visit', 'duration',
        ]


class BusinessCreateSerializer(serializers.Serializer):
    """Payload for registering a business. The first category becomes the primary one."""
    name = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True)
    address = serializers.CharField(max_length=300, required=False, allow_blank=True)
    city_id = serializers.IntegerField()
    area_id = serializers.IntegerField(required=False, allow_null=True)
    phone = serializers.CharField(max_length=50, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    website = serializers.URLField(required=False, allow_blank=True)
    category_ids = serializers.ListField(child=serializers.IntegerField(), required=False, default=list)


class TourismPlaceCreateSerializer(serializers.Serializer):
    """Payload for adding a tourism place (admins only)."""
    name = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True)
    short_description = serializers.CharField(max_length=300, required=False, allow_blank=True)
    address = serializers.CharField(max_length=300, required=False, allow_blank=True)
    city_id = serializers.IntegerField()
    area_id = serializers.IntegerField(required=False, allow_null=True)
    category_id = serializers.IntegerField(required=False, allow_null=True)
    entry_fee = serializers.CharField(max_length=100, required=False, allow_blank=True)
    timings = serializers.CharField(max_length=100, required=False, allow_blank=True)
    best_time_to_visit = serializers.CharField(max_length=100, required=False, allow_blank=True)
    duration = serializers.CharField(max_length=100, required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=TourismPlace.Status.choices, required=False)
    is_featured = serializers.BooleanField(required=False, default=False)


class StatusUpdateSerializer(serializers.Serializer):
    status = serializers.CharField()


class TourismImageSerializer(serializers.ModelSerializer):
    class Meta:
        model = TourismImage
        fields = [
            'id', 'place', 'url', 'alt_text', 'caption', 'image_type',
            'is_featured', 'sort_order', 'uploaded_by', 'created_at',
        ]


class TourismImageWriteSerializer(serializers.Serializer):
    """Payload for adding an image (`url` required) or, with `partial=True`, editing one."""
    url = serializers.URLField(max_length=500)
    alt_text = serializers.CharField(max_length=200, required=False, allow_blank=True)
    caption = serializers.CharField(max_length=300, required=False, allow_blank=True)
    image_type = serializers.ChoiceField(choices=TourismImage.ImageType.choices, required=False)
    is_featured = serializers.BooleanField(required=False)
    sort_order = serializers.IntegerField(min_value=0, required=False)
