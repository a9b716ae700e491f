from dataclasses import asdict, replace

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticatedOrReadOnly
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from catalog_app import gallery, services
from catalog_app.families import BUSINESS, TOURISM
from catalog_app.models import Area, Category, City
from catalog_app.query import enrich_entities, get_entity_by_slug, list_catalog
from core.exceptions import NotFoundError
from reviews_app.api.serializers import ReviewReadSerializer
from reviews_app.ratings import get_rating_summary
from reviews_app.services import list_reviews
from user_auth_app.api.permissions import IsAdminRole
from user_auth_app.roles import is_admin
from .filters import AreaFilter, CategoryFilter, CityFilter
from .serializers import (
    AreaSerializer,
    BusinessCreateSerializer,
    BusinessSerializer,
    CatalogQuerySerializer,
    CategorySerializer,
    CitySerializer,
    StatusUpdateSerializer,
    TourismImageSerializer,
    TourismImageWriteSerializer,
    TourismPlaceCreateSerializer,
    TourismPlaceSerializer,
)


class CityViewSet(viewsets.ReadOnlyModelViewSet):
    """`GET /api/cities/`: active cities, optionally filtered by `?state=`."""
    queryset = City.objects.filter(is_active=True)
    serializer_class = CitySerializer
    permission_classes = [AllowAny]
    pagination_class = None
    filter_backends = [DjangoFilterBackend]
    filterset_class = CityFilter


class AreaViewSet(viewsets.ReadOnlyModelViewSet):
    """`GET /api/areas/?city_id=`: active areas, usually of one city."""
    queryset = Area.objects.filter(is_active=True)
    serializer_class = AreaSerializer
    permission_classes = [AllowAny]
    pagination_class = None
    filter_backends = [DjangoFilterBackend]
    filterset_class = AreaFilter


class CategoryViewSet(viewsets.ReadOnlyModelViewSet):
    """`GET /api/categories/?feature_type=`: active categories of one or both families."""
    queryset = Category.objects.filter(is_active=True)
    serializer_class = CategorySerializer
    permission_classes = [AllowAny]
    pagination_class = None
    filter_backends = [DjangoFilterBackend]
    filterset_class = CategoryFilter


class CatalogViewSet(viewsets.GenericViewSet):
    """
    Common endpoints of both catalog families, addressed by slug.

    Subclasses set `family`, the read serializer and the create and update
    logic. The endpoints are:
    - `GET /`: a filtered, sorted and paginated listing.
    - `POST /`: creates a listing.
    - `GET /{slug}/` and `PATCH /{slug}/`: one listing.
    - `GET /{slug}/rating-summary/` and `GET /{slug}/reviews/`.
    - `PATCH /{slug}/status/`, `DELETE /{slug}/` and `GET /counts/`: admin only.

    Visitors and regular users only ever see published listings, except for
    their own ones (`?owner_id=<own id>`). Admins see everything.
    """
    family = None
    lookup_field = 'slug'
    permission_classes = [IsAuthenticatedOrReadOnly]

    def get_permissions(self):
        if self.action in ['change_status', 'counts', 'destroy']:
            return [IsAdminRole()]
        return super().get_permissions()

    def get_queryset(self):
        return self.family.model.objects.all()

    def _entity_id(self, slug):
        entity_id = self.get_queryset().filter(slug=slug).values_list('pk', flat=True).first()
        if entity_id is None:
            raise NotFoundError(f"No {self.family.label} found for '{slug}'.")
        return entity_id

    def _visible_filters(self, request, filters):
        """Restricts non-admins to published listings unless they list their own."""
        viewer_id = request.user.id
        if is_admin(viewer_id):
            return filters
        if viewer_id is not None and filters.owner_id == viewer_id:
            return filters
        return replace(filters, status=self.family.published_status)

    def list(self, request, *args, **kwargs):
        query = CatalogQuerySerializer(data=request.query_params.dict())
        query.is_valid(raise_exception=True)

        result = list_catalog(
            self.family,
            self._visible_filters(request, query.to_filters()),
            sort=query.validated_data['sort'],
            page=query.validated_data['page'],
            page_size=query.resolved_page_size,
        )
        return Response({
            'count': result.total_count,
            'page': result.page,
            'page_size': result.page_size,
            'total_pages': result.total_pages,
            'has_next': result.has_next,
            'has_previous': result.has_previous,
            'results': self.get_serializer(result.items, many=True).data,
        })

    def retrieve(self, request, slug=None):
        entity = get_entity_by_slug(self.family, slug, viewer_id=request.user.id)
        return Response(self.get_serializer(entity).data)

    def create(self, request, *args, **kwargs):
        """Creates a listing; failed secondary writes come back as `warnings`."""
        serializer = self.create_serializer_class(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = self.create_listing(request.user.id, serializer.validated_data)
        enrich_entities(self.family, [result.entity])
        data = self.get_serializer(result.entity).data
        data['warnings'] = result.warnings
        return Response(data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, slug=None):
        """Edits the details of a listing; the service decides who may do so."""
        serializer = self.create_serializer_class(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        result = self.update_listing(request.user.id, self._entity_id(slug), serializer.validated_data)
        enrich_entities(self.family, [result.entity])
        data = self.get_serializer(result.entity).data
        data['warnings'] = result.warnings
        return Response(data)

    def destroy(self, request, slug=None):
        services.delete_listing(self.family, self._entity_id(slug), request.user.id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['get'], url_path='rating-summary')
    def rating_summary(self, request, slug=None):
        entity = get_entity_by_slug(self.family, slug, viewer_id=request.user.id)
        return Response(asdict(get_rating_summary(self.family, entity.pk)))

    @action(detail=True, methods=['get'])
    def reviews(self, request, slug=None):
        entity = get_entity_by_slug(self.family, slug, viewer_id=request.user.id)
        reviews = list_reviews(self.family, entity.pk)
        return Response(ReviewReadSerializer(reviews, many=True).data)

    @action(detail=True, methods=['patch'], url_path='status', url_name='status')
    def change_status(self, request, slug=None):
        serializer = StatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        entity = services.set_status(
            self.family, self._entity_id(slug), serializer.validated_data['status'], request.user.id
        )
        enrich_entities(self.family, [entity])
        return Response(self.get_serializer(entity).data)

    @action(detail=False, methods=['get'])
    def counts(self, request):
        return Response(services.status_counts(self.family))


class BusinessViewSet(CatalogViewSet):
    """`/api/businesses/`: any signed-in user may register a business."""
    family = BUSINESS
    serializer_class = BusinessSerializer
    create_serializer_class = BusinessCreateSerializer

    def create_listing(self, user_id, data):
        return services.create_business(user_id, data)

    def update_listing(self, user_id, entity_id, data):
        return services.update_business(user_id, entity_id, data)


class TourismPlaceViewSet(CatalogViewSet):
    """
    `/api/tourism/`: tourism places are curated by admins.

    On top of the shared endpoints every place has a picture gallery:
    `GET /{slug}/images/` is public, adding (`POST`) as well as editing and
    removing single images (`PATCH`/`DELETE /{slug}/images/{id}/`) is admin only.
    """
    family = TOURISM
    serializer_class = TourismPlaceSerializer
    create_serializer_class = TourismPlaceCreateSerializer

    def get_permissions(self):
        if self.action in ['create', 'partial_update', 'image_detail']:
            return [IsAdminRole()]
        if self.action == 'images' and self.request.method == 'POST':
            return [IsAdminRole()]
        return super().get_permissions()

    def create_listing(self, user_id, data):
        return services.create_tourism_place(user_id, data)

    def update_listing(self, user_id, entity_id, data):
        return services.update_tourism_place(user_id, entity_id, data)

    @action(detail=True, methods=['get', 'post'])
    def images(self, request, slug=None):
        if request.method == 'POST':
            serializer = TourismImageWriteSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            image = gallery.add_place_image(self._entity_id(slug), request.user.id, serializer.validated_data)
            return Response(TourismImageSerializer(image).data, status=status.HTTP_201_CREATED)

        place = get_entity_by_slug(self.family, slug, viewer_id=request.user.id)
        images = gallery.list_place_images(place.pk, image_type=request.query_params.get('image_type'))
        return Response(TourismImageSerializer(images, many=True).data)

    @action(detail=True, methods=['patch', 'delete'], url_path=r'images/(?P<image_id>\d+)', url_name='image')
    def image_detail(self, request, slug=None, image_id=None):
        place_id = self._entity_id(slug)
        if request.method == 'DELETE':
            gallery.remove_place_image(place_id, image_id, request.user.id)
            return Response(status=status.HTTP_204_NO_CONTENT)

        serializer = TourismImageWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        image = gallery.update_place_image(place_id, image_id, request.user.id, serializer.validated_data)
        return Response(TourismImageSerializer(image).data)
