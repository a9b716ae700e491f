from django.db import models
from django.db.models import Q
from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator


class Review(models.Model):
    """
    A rating and review left by a user for one catalog entity.

    A review points at exactly one entity: either a business or a tourism
    place, never both and never neither (enforced by a check constraint). Each
    user can hold only one *active* review per entity. Soft-deleted reviews do
    not count, so a user who deleted their review may write a new one. This
    rule is enforced twice: the services check first to produce a friendly
    error, and a partial unique constraint is the authoritative guard.

    Attributes:
        business (ForeignKey): The reviewed business, or None.
        tourism_place (ForeignKey): The reviewed tourism place, or None.
        user (ForeignKey): The author of the review.
        rating (PositiveSmallIntegerField): A star rating from 1 to 5.
        title (CharField): Optional headline.
        content (TextField): The review text.
        visit_date (DateField): Optional date of the visit (tourism places).
        status (CharField): 'pending', 'published' or 'rejected'. Reviews are
            published immediately on submission.
        is_verified (BooleanField): Marked as genuine by an admin.
        edit_count (PositiveSmallIntegerField): How often the author changed the review.
        edited_at (DateTimeField): Time of the last edit by the author.
        is_deleted (BooleanField): Soft delete flag. Deleted reviews are kept
            for audit but hidden from every read path.
    """
    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        PUBLISHED = 'published', 'Published'
        REJECTED = 'rejected', 'Rejected'

    # --- Target entity (exactly one of the two is set) ---
    business = models.ForeignKey(
        'catalog_app.Business',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='reviews',
    )
    tourism_place = models.ForeignKey(
        'catalog_app.TourismPlace',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='reviews',
    )

    # The user who wrote the review.
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='reviews',
        help_text="The user who wrote the review."
    )

    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)],
        help_text="The rating given, from 1 to 5."
    )
    title = models.CharField(max_length=200, blank=True, default='')
    content = models.TextField(blank=True, default='')
    visit_date = models.DateField(null=True, blank=True)

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PUBLISHED)
    is_verified = models.BooleanField(default=False)

    # --- Lifecycle ---
    edit_count = models.PositiveSmallIntegerField(default=0)
    edited_at = models.DateTimeField(null=True, blank=True)
    is_deleted = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        # Default ordering for querysets: newest reviews first.
        ordering = ['-created_at', '-id']
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(business__isnull=False, tourism_place__isnull=True)
                    | Q(business__isnull=True, tourism_place__isnull=False)
                ),
                name='review_targets_exactly_one_entity',
            ),
            models.CheckConstraint(
                condition=Q(rating__gte=1, rating__lte=5),
                name='review_rating_between_1_and_5',
            ),
            # One active review per user and entity. Deleted reviews are left out,
            # so deleting a review frees the user to write a new one.
            models.UniqueConstraint(
                fields=['business', 'user'],
                condition=Q(is_deleted=False),
                name='unique_active_business_review',
            ),
            models.UniqueConstraint(
                fields=['tourism_place', 'user'],
                condition=Q(is_deleted=False),
                name='unique_active_tourism_review',
            ),
        ]
        verbose_name = "Review"
        verbose_name_plural = "Reviews"

    def __str__(self):
        return f"Review by {self.user} for {self.target} ({self.rating} stars)"

    @property
    def target(self):
        """The reviewed entity, whichever family it belongs to."""
        return self.business if self.business_id else self.tourism_place

    @property
    def target_id(self):
        return self.business_id or self.tourism_place_id


class ReviewImage(models.Model):
    """
    A photo attached to a review.

    The file itself lives in external object storage; only its public URL is
    stored here. Images are written after their review, one at a time.
    """
    review = models.ForeignKey(Review, on_delete=models.CASCADE, related_name='images')
    url = models.URLField(max_length=500)
    sort_order = models.PositiveSmallIntegerField(default=0)
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='review_images',
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['sort_order', 'id']

    def __str__(self):
        return f"Image {self.sort_order} of review {self.review_id}"


class ReviewReply(models.Model):
    """
    The answer of an entity owner to a review.

    A review has at most one reply; the one-to-one relation is the store-level
    guard for that rule. Replies are append-only: they cannot be edited or
    deleted through the services.
    """
    review = models.OneToOneField(Review, on_delete=models.CASCADE, related_name='reply')

    # The entity the reply was written for, used to scope the ownership check.
    business = models.ForeignKey(
        'catalog_app.Business',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='review_replies',
    )
    tourism_place = models.ForeignKey(
        'catalog_app.TourismPlace',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='review_replies',
    )

    content = models.TextField()
    replied_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='review_replies',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Review Reply"
        verbose_name_plural = "Review Replies"

    def __str__(self):
        return f"Reply by {self.replied_by} to review {self.review_id}"
