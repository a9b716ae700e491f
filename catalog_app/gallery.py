"""
The picture gallery of tourism places.

Images are uploaded to external storage by the client; this module only
keeps their public URLs. Everybody may look at the gallery of a place,
changing it is reserved for admins.
"""
import logging

from django.db.models import Max

from core.exceptions import AuthorizationError, NotFoundError, ValidationError, store_errors
from user_auth_app.roles import is_admin
from .models import TourismImage, TourismPlace

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ('alt_text', 'caption', 'image_type', 'is_featured', 'sort_order')


def _require_admin(actor_id):
    if not is_admin(actor_id):
        logger.warning("User %s tried to change a tourism gallery without admin role", actor_id)
        raise AuthorizationError("Only administrators can manage tourism images.")


def _check_image_type(data):
    image_type = data.get('image_type')
    if image_type is not None and image_type not in TourismImage.ImageType.values:
        raise ValidationError(f"Unknown image type '{image_type}'.", code='invalid')


def _get_active_image(place_id, image_id):
    image = TourismImage.objects.filter(pk=image_id, place_id=place_id, is_active=True).first()
    if image is None:
        raise NotFoundError("Image not found.")
    return image


def list_place_images(place_id, image_type=None):
    """Active images of a place in gallery order, optionally of one `image_type`."""
    with store_errors('list tourism images'):
        images = TourismImage.objects.filter(place_id=place_id, is_active=True)
        if image_type:
            images = images.filter(image_type=image_type)
        return list(images)


def add_place_image(place_id, actor_id, data):
    """
    Adds an image URL to the gallery of a place. Admins only.

    Without an explicit `sort_order` the image is appended after the last
    active one.

    Raises:
        AuthorizationError: `actor_id` is not an admin.
        NotFoundError: No such place.
        ValidationError: Missing URL or unknown image type.
    """
    _require_admin(actor_id)
    url = (data.get('url') or '').strip()
    if not url:
        raise ValidationError("An image URL is required.", code='required')
    _check_image_type(data)

    with store_errors('add tourism image'):
        if not TourismPlace.objects.filter(pk=place_id).exists():
            raise NotFoundError("Tourism place not found.")
        sort_order = data.get('sort_order')
        if sort_order is None:
            last = TourismImage.objects.filter(place_id=place_id, is_active=True).aggregate(Max('sort_order'))
            sort_order = 0 if last['sort_order__max'] is None else last['sort_order__max'] + 1

        image = TourismImage.objects.create(
            place_id=place_id,
            url=url,
            uploaded_by_id=actor_id,
            sort_order=sort_order,
            **{key: data[key] for key in EDITABLE_FIELDS if key in data and key != 'sort_order'},
        )

    logger.info("Image %s added to tourism place %s by admin %s", image.pk, place_id, actor_id)
    return image


def update_place_image(place_id, image_id, actor_id, data):
    """Changes the caption, type, flag or position of an image. Admins only."""
    _require_admin(actor_id)
    _check_image_type(data)

    with store_errors('update tourism image'):
        image = _get_active_image(place_id, image_id)
        changed = [key for key in EDITABLE_FIELDS if key in data]
        for key in changed:
            setattr(image, key, data[key])
        if changed:
            image.save(update_fields=changed + ['updated_at'])
    return image


def remove_place_image(place_id, image_id, actor_id):
    """
    Takes an image out of the gallery. Admins only.

    The row is deactivated rather than deleted.

    Raises:
        NotFoundError: The image does not exist, belongs to another place or
            was already removed.
    """
    _require_admin(actor_id)

    with store_errors('remove tourism image'):
        image = _get_active_image(place_id, image_id)
        image.is_active = False
        image.save(update_fields=['is_active', 'updated_at'])

    logger.info("Image %s removed from tourism place %s by admin %s", image_id, place_id, actor_id)
