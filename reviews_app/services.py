"""
The review lifecycle: submit, edit, soft delete and owner replies.

Both catalog families follow identical rules; the family descriptor only
decides which foreign key of `Review` the entity id goes into. Every function
receives the acting user's id explicitly and reports failures as the typed
errors from `core.exceptions`.
"""
import logging
from dataclasses import dataclass, field

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import URLValidator
from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from catalog_app.families import BUSINESS, TOURISM
from core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
    store_errors,
)
from user_auth_app.roles import is_owner
from .models import Review, ReviewImage, ReviewReply
from .ratings import visible_reviews

logger = logging.getLogger(__name__)

DUPLICATE_REVIEW_MESSAGE = "You have already reviewed this listing."
DUPLICATE_REPLY_MESSAGE = "A reply already exists for this review."


def edit_limit():
    return getattr(settings, 'REVIEW_EDIT_LIMIT', 2)


@dataclass
class ReviewSubmission:
    """The created review plus warnings about attachments that could not be stored."""
    review: Review
    warnings: list = field(default_factory=list)


@dataclass(frozen=True)
class EditEligibility:
    can_edit: bool
    edit_count: int


# --- Helpers ---
def family_of(review):
    """The catalog family of the entity a review belongs to."""
    return BUSINESS if review.business_id else TOURISM


def validate_rating(rating):
    """Accepts only whole numbers from 1 to 5 (booleans are rejected too)."""
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise ValidationError("Rating must be a whole number from 1 to 5.", code='invalid_rating')


def validate_content(content, what='Review content'):
    if not content or not content.strip():
        raise ValidationError(f"{what} is required.", code='required')
    return content.strip()


def get_active_review(review_id):
    """Loads a review that has not been soft-deleted, or raises `NotFoundError`."""
    review = Review.objects.filter(pk=review_id, is_deleted=False).first()
    if review is None:
        raise NotFoundError("Review not found.")
    return review


def has_active_review(family, entity_id, user_id):
    """True if the user holds a review for the entity that has not been deleted."""
    return Review.objects.filter(
        user_id=user_id, is_deleted=False, **{f'{family.review_field}_id': entity_id}
    ).exists()


def has_reply(review):
    return ReviewReply.objects.filter(review=review).exists()


def _require_author(review, user_id, action):
    if review.user_id != user_id:
        logger.warning("User %s tried to %s review %s of user %s", user_id, action, review.pk, review.user_id)
        raise AuthorizationError(f"You can only {action} your own reviews.")


# --- Operations ---
def submit_review(family, entity_id, user_id, rating, content, title='', visit_date=None, image_urls=()):
    """
    Creates a published review of `entity_id` written by `user_id`.

    The duplicate check runs before the insert to give a clean error; the
    partial unique constraint on the table catches the race where two
    submissions pass the check at the same time, and is reported the same way.

    Images are attached after the review has been stored, each on its own. A
    failing image does not undo the review: it is logged and reported in
    `ReviewSubmission.warnings`.

    Raises:
        ValidationError: Invalid rating or empty content.
        NotFoundError: The entity does not exist.
        ConflictError: The user already has an active review for the entity.
    """
    validate_rating(rating)
    content = validate_content(content)

    with store_errors('submit review'):
        if not family.model.objects.filter(pk=entity_id).exists():
            raise NotFoundError(f"{family.label.capitalize()} not found.")

        if has_active_review(family, entity_id, user_id):
            logger.warning("Duplicate review of %s %s by user %s rejected", family.key, entity_id, user_id)
            raise ConflictError(DUPLICATE_REVIEW_MESSAGE, code='duplicate_review')

        try:
            with transaction.atomic():
                review = Review.objects.create(
                    user_id=user_id,
                    rating=rating,
                    title=(title or '').strip(),
                    content=content,
                    visit_date=visit_date,
                    status=Review.Status.PUBLISHED,
                    edit_count=0,
                    is_deleted=False,
                    **{f'{family.review_field}_id': entity_id},
                )
        except IntegrityError as exc:
            logger.warning("Concurrent duplicate review of %s %s by user %s: %s", family.key, entity_id, user_id, exc)
            raise ConflictError(DUPLICATE_REVIEW_MESSAGE, code='duplicate_review') from exc

        warnings = attach_images(review, user_id, image_urls)

    logger.info("Review %s created for %s %s by user %s", review.pk, family.key, entity_id, user_id)
    return ReviewSubmission(review=review, warnings=warnings)


def attach_images(review, user_id, image_urls):
    """
    Stores the image URLs of a review, one savepoint per image.

    Returns:
        list: One human-readable warning per image that could not be stored.
    """
    warnings = []
    validate_url = URLValidator()
    for position, url in enumerate(image_urls):
        try:
            validate_url(url)
            with transaction.atomic():
                ReviewImage.objects.create(review=review, url=url, sort_order=position, uploaded_by_id=user_id)
        except (DjangoValidationError, DatabaseError) as exc:
            logger.warning("Image %d of review %s not stored: %s", position + 1, review.pk, exc)
            warnings.append(f"Image {position + 1} could not be attached.")
    return warnings


def edit_review(review_id, user_id, rating, content, title=''):
    """
    Changes rating, title and content of a review on behalf of its author.

    The edit counter is only incremented if it still holds the value read
    before, so two concurrent edits can never push a review past the limit.

    Raises:
        ValidationError: Invalid rating or empty content.
        NotFoundError: The review does not exist or was deleted.
        AuthorizationError: `user_id` is not the author.
        ConflictError: The edit limit has been reached.
    """
    validate_rating(rating)
    content = validate_content(content)

    with store_errors('edit review'):
        review = get_active_review(review_id)
        _require_author(review, user_id, 'edit')

        limit = edit_limit()
        if review.edit_count >= limit:
            raise ConflictError(
                f"You have reached the maximum edit limit ({limit} edits).", code='edit_limit_reached'
            )

        now = timezone.now()
        updated = Review.objects.filter(pk=review.pk, edit_count=review.edit_count, is_deleted=False).update(
            rating=rating,
            title=(title or '').strip(),
            content=content,
            edit_count=review.edit_count + 1,
            edited_at=now,
            updated_at=now,
        )
        if not updated:
            # Someone else changed the review between the read and the update.
            raise ConflictError(
                f"You have reached the maximum edit limit ({limit} edits).", code='edit_limit_reached'
            )
        review.refresh_from_db()

    logger.info("Review %s edited by user %s (%d/%d)", review.pk, user_id, review.edit_count, limit)
    return review


def soft_delete_review(review_id, user_id):
    """
    Hides a review on behalf of its author.

    The row stays in the table for audit purposes but disappears from every
    listing, summary and duplicate check.

    Raises:
        NotFoundError: The review does not exist or was already deleted.
        AuthorizationError: `user_id` is not the author.
    """
    with store_errors('delete review'):
        review = get_active_review(review_id)
        _require_author(review, user_id, 'delete')

        review.is_deleted = True
        review.save(update_fields=['is_deleted', 'updated_at'])

    logger.info("Review %s soft-deleted by user %s", review.pk, user_id)
    return review


def reply_to_review(review_id, entity_id, replier_id, content):
    """
    Stores the owner's reply to a review.

    The replier must own `entity_id`, and the review must belong to that very
    entity. Each review takes a single reply; the one-to-one relation of
    `ReviewReply` backs up the existence check against concurrent replies.

    Raises:
        ValidationError: Empty content.
        NotFoundError: The review does not exist or was deleted.
        AuthorizationError: The replier does not own the review's entity.
        ConflictError: The review already has a reply.
    """
    content = validate_content(content, what='Reply content')

    with store_errors('reply to review'):
        review = get_active_review(review_id)
        family = family_of(review)

        if review.target_id != entity_id or not is_owner(replier_id, entity_id, family):
            logger.warning("User %s may not reply to review %s", replier_id, review.pk)
            raise AuthorizationError("Only the owner of this listing can reply to its reviews.")

        if has_reply(review):
            raise ConflictError(DUPLICATE_REPLY_MESSAGE, code='duplicate_reply')

        try:
            with transaction.atomic():
                reply = ReviewReply.objects.create(
                    review=review,
                    replied_by_id=replier_id,
                    content=content,
                    **{f'{family.review_field}_id': entity_id},
                )
        except IntegrityError as exc:
            logger.warning("Concurrent duplicate reply to review %s: %s", review.pk, exc)
            raise ConflictError(DUPLICATE_REPLY_MESSAGE, code='duplicate_reply') from exc

    logger.info("Reply %s added to review %s by user %s", reply.pk, review.pk, replier_id)
    return reply


def can_edit(review_id, user_id):
    """
    Tells a caller whether to offer the edit action to `user_id`.

    Raises:
        NotFoundError: The review does not exist or was deleted.
    """
    with store_errors('edit eligibility'):
        review = get_active_review(review_id)
    allowed = review.user_id == user_id and review.edit_count < edit_limit()
    return EditEligibility(can_edit=allowed, edit_count=review.edit_count)


def list_reviews(family, entity_id):
    """
    The visible reviews of an entity, newest first, with author, reply and images.

    Each review gets a `user_name` attribute holding the author's display name.
    """
    with store_errors('list reviews'):
        reviews = list(
            visible_reviews()
            .filter(**{f'{family.review_field}_id': entity_id})
            .select_related('reply', 'user__userprofile')
            .prefetch_related('images')
            .order_by('-created_at', '-id')
        )
    for review in reviews:
        profile = getattr(review.user, 'userprofile', None)
        review.user_name = profile.display_name if profile else review.user.username
    return reviews
