from django.conf import settings
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.permissions import IsAuthenticated, IsAuthenticatedOrReadOnly
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from catalog_app.families import get_family
from reviews_app import services
from reviews_app.ratings import visible_reviews
from .serializers import (
    ReviewReadSerializer,
    ReviewCreateSerializer,
    ReviewUpdateSerializer,
    ReplyCreateSerializer,
    ReviewReplySerializer,
)
from .filters import ReviewFilter


class ReviewViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    Exposes the review lifecycle over HTTP.

    This ViewSet provides the following endpoints:
    - `GET /api/reviews/`: Lists visible reviews with filtering and ordering.
    - `POST /api/reviews/`: Submits a review for a business or tourism place.
    - `GET /api/reviews/{id}/`: Retrieves a single visible review.
    - `PUT/PATCH /api/reviews/{id}/`: Edits a review (author only, limited edits).
    - `DELETE /api/reviews/{id}/`: Soft-deletes a review (author only).
    - `POST /api/reviews/{id}/reply/`: Adds the owner's reply.
    - `GET /api/reviews/{id}/edit-status/`: Tells whether the caller may still edit.

    Reading is public. All rules about who may write what live in
    `reviews_app.services`; its typed errors are rendered by DRF directly.
    """
    # Soft-deleted and unpublished reviews never leave the API.
    queryset = visible_reviews().select_related('user__userprofile', 'reply').prefetch_related('images')
    serializer_class = ReviewReadSerializer
    permission_classes = [IsAuthenticatedOrReadOnly]
    lookup_value_regex = r'\d+'

    # Pagination is disabled for this view; all results are returned in a single response.
    pagination_class = None

    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = ReviewFilter
    ordering_fields = ['created_at', 'updated_at', 'rating']
    ordering = ['-created_at', '-id']

    def get_permissions(self):
        """The edit-status lookup only makes sense for a known user."""
        if self.action == 'edit_status':
            return [IsAuthenticated()]
        return super().get_permissions()

    def _respond_with(self, review, status_code=status.HTTP_200_OK, warnings=None):
        review = self.get_queryset().get(pk=review.pk)
        data = ReviewReadSerializer(review, context=self.get_serializer_context()).data
        if warnings is not None:
            data['warnings'] = warnings
        return Response(data, status=status_code)

    def create(self, request, *args, **kwargs):
        """
        Submits a review on behalf of the authenticated user.

        Images that could not be attached are listed under `warnings`; the
        review itself is created regardless.
        """
        serializer = ReviewCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = services.submit_review(
            get_family(data['family']),
            data['entity_id'],
            request.user.id,
            rating=data['rating'],
            content=data['content'],
            title=data['title'],
            visit_date=data['visit_date'],
            image_urls=data['image_urls'],
        )
        return self._respond_with(result.review, status.HTTP_201_CREATED, warnings=result.warnings)

    def update(self, request, *args, **kwargs):
        """
        Edits rating, title and content of the caller's own review.

        For PATCH requests missing fields keep their current value.
        """
        partial = kwargs.pop('partial', False)
        review = services.get_active_review(kwargs['pk'])

        serializer = ReviewUpdateSerializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        edited = services.edit_review(
            review.pk,
            request.user.id,
            rating=data.get('rating', review.rating),
            content=data.get('content', review.content),
            title=data.get('title', review.title),
        )
        return self._respond_with(edited)

    def partial_update(self, request, *args, **kwargs):
        kwargs['partial'] = True
        return self.update(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        services.soft_delete_review(kwargs['pk'], request.user.id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post'])
    def reply(self, request, pk=None):
        """Stores the reply of the entity owner. A review takes one reply only."""
        serializer = ReplyCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        review = services.get_active_review(pk)
        entity_id = serializer.validated_data.get('entity_id', review.target_id)

        reply = services.reply_to_review(
            review.pk, entity_id, request.user.id, serializer.validated_data['content']
        )
        return Response(ReviewReplySerializer(reply).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['get'], url_path='edit-status')
    def edit_status(self, request, pk=None):
        eligibility = services.can_edit(pk, request.user.id)
        return Response({
            'can_edit': eligibility.can_edit,
            'edit_count': eligibility.edit_count,
            'edit_limit': settings.REVIEW_EDIT_LIMIT,
        })
