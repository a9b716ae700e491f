from rest_framework import serializers

from catalog_app.families import FAMILIES
from ..models import Review, ReviewReply


class ReviewReplySerializer(serializers.ModelSerializer):
    """Read-only representation of an owner's reply to a review."""

    class Meta:
        model = ReviewReply
        fields = ['id', 'content', 'replied_by', 'created_at']


class ReviewReadSerializer(serializers.ModelSerializer):
    """
    Serializer for the `Review` model, intended for read-only operations.

    It is used in list and detail responses. The author is included both as
    id and as display name, the owner's reply (if any) is nested, and the
    images are flattened to their active URLs.
    """
    user_name = serializers.SerializerMethodField()
    images = serializers.SerializerMethodField()
    reply = ReviewReplySerializer(read_only=True, allow_null=True)

    class Meta:
        model = Review
        fields = [
            'id',
            'business',
            'tourism_place',
            'user',
            'user_name',
            'rating',
            'title',
            'content',
            'visit_date',
            'status',
            'is_verified',
            'edit_count',
            'edited_at',
            'images',
            'reply',
            'created_at',
            'updated_at',
        ]

    def get_user_name(self, obj):
        """Uses the name attached by the service layer, else the profile."""
        name = getattr(obj, 'user_name', None)
        if name:
            return name
        profile = getattr(obj.user, 'userprofile', None)
        return profile.display_name if profile else obj.user.username

    def get_images(self, obj):
        return [image.url for image in obj.images.all() if image.is_active]


class ReviewCreateSerializer(serializers.Serializer):
    """
    Input of the review submission endpoint.

    Only the shape of the payload is checked here. Range and content rules
    are enforced by `reviews_app.services.submit_review`, which reports them
    with their specific error codes.
    """
    family = serializers.ChoiceField(choices=sorted(FAMILIES))
    entity_id = serializers.IntegerField()
    rating = serializers.IntegerField()
    title = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')
    content = serializers.CharField(allow_blank=True, trim_whitespace=False)
    visit_date = serializers.DateField(required=False, allow_null=True, default=None)
    image_urls = serializers.ListField(child=serializers.CharField(), required=False, default=list)


class ReviewUpdateSerializer(serializers.Serializer):
    """
    Input of the edit endpoint.

    On PATCH any field may be left out; the view fills the gaps with the
    current values of the review.
    """
    rating = serializers.IntegerField()
    title = serializers.CharField(max_length=200, required=False, allow_blank=True)
    content = serializers.CharField(allow_blank=True, trim_whitespace=False)


class ReplyCreateSerializer(serializers.Serializer):
    """Input of the reply endpoint. `entity_id` defaults to the entity of the review."""
    content = serializers.CharField(allow_blank=True, trim_whitespace=False)
    entity_id = serializers.IntegerField(required=False)
