"""
Creating catalog listings and moving them through their lifecycle.

Businesses are self-service: any signed-in user may register one, which
promotes them to business owner. Owners keep editing the details of their
business afterwards. Tourism places, every status change and deletions are
reserved for admins.
"""
import logging
from dataclasses import dataclass, field

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Count
from django.utils import timezone
from django.utils.text import slugify

from core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
    store_errors,
)
from user_auth_app.roles import is_admin, is_owner, promote_if_first_listing
from .families import BUSINESS, TOURISM
from .models import Area, Category, City

logger = logging.getLogger(__name__)

BUSINESS_FIELDS = ('description', 'address', 'phone', 'email', 'website')
TOURISM_FIELDS = (
    'description', 'address', 'short_description', 'entry_fee',
    'timings', 'best_time_to_visit', 'duration',
)


@dataclass
class ListingResult:
    """A created or updated entity plus warnings about secondary writes that failed."""
    entity: object
    warnings: list = field(default_factory=list)
    promoted: bool = False


def unique_slug(model, name):
    """
    Derives a slug from `name` that no row of `model` uses yet.

    Collisions get a numeric suffix: 'city-palace', 'city-palace-2', ...
    """
    base = slugify(name) or 'listing'
    slug, suffix = base, 2
    while model.objects.filter(slug=slug).exists():
        slug = f'{base}-{suffix}'
        suffix += 1
    return slug


def _require_admin(actor_id, action):
    if not is_admin(actor_id):
        logger.warning("User %s tried to %s without admin role", actor_id, action)
        raise AuthorizationError(f"Only administrators can {action}.")


def _clean_name(data):
    name = (data.get('name') or '').strip()
    if not name:
        raise ValidationError("Name is required.", code='required')
    return name


def _check_location(data):
    """The city must exist, and the area, when given, has to lie in that city."""
    city_id = data.get('city_id')
    if city_id is not None and not City.objects.filter(pk=city_id).exists():
        raise ValidationError("Unknown city.", code='invalid')
    area_id = data.get('area_id')
    if area_id is None:
        return
    if not Area.objects.filter(pk=area_id, city_id=data.get('city_id')).exists():
        raise ValidationError("The area does not belong to the selected city.", code='invalid')


def _insert(family, **values):
    try:
        with transaction.atomic():
            return family.model.objects.create(**values)
    except IntegrityError as exc:
        logger.warning("Could not insert %s '%s': %s", family.key, values.get('slug'), exc)
        raise ConflictError(f"A {family.label} with this slug already exists.", code='duplicate_slug') from exc


def create_business(owner_id, data):
    """
    Registers a business for `owner_id` in 'pending' status.

    `data` holds the listing fields plus an optional `category_ids` list; the
    first category becomes the primary one. The category links are written
    after the business row, one at a time, and a link that cannot be written
    ends up in the returned warnings instead of failing the registration.
    Registering the first business promotes a plain user to business owner.

    Raises:
        ValidationError: Missing name or an area outside the city.
        ConflictError: The generated slug was taken concurrently.
    """
    name = _clean_name(data)

    with store_errors('create business'):
        _check_location(data)
        business = _insert(
            BUSINESS,
            name=name,
            slug=unique_slug(BUSINESS.model, name),
            owner_id=owner_id,
            status=BUSINESS.initial_status,
            city_id=data.get('city_id'),
            area_id=data.get('area_id'),
            **{key: data[key] for key in BUSINESS_FIELDS if key in data},
        )
        warnings = _link_categories(business, data.get('category_ids') or [])
        promoted = promote_if_first_listing(owner_id)

    logger.info("Business %s ('%s') created by user %s", business.pk, business.slug, owner_id)
    return ListingResult(entity=business, warnings=warnings, promoted=promoted)


def _link_categories(business, category_ids):
    warnings = []
    valid = set(
        Category.objects.filter(
            pk__in=category_ids, feature_type=BUSINESS.category_feature_type, is_active=True
        ).values_list('pk', flat=True)
    )
    for position, category_id in enumerate(category_ids):
        if category_id not in valid:
            warnings.append(f"Category {category_id} is not an active business category.")
            continue
        try:
            with transaction.atomic():
                business.category_links.create(category_id=category_id, is_primary=position == 0)
        except DatabaseError as exc:
            logger.warning("Category %s not linked to business %s: %s", category_id, business.pk, exc)
            warnings.append(f"Category {category_id} could not be linked.")
    return warnings


def create_tourism_place(creator_id, data):
    """
    Adds a tourism place. Admins only.

    The place starts as 'draft' unless `data['status']` says otherwise; a place
    created as 'published' is stamped with its publication time right away.

    Raises:
        AuthorizationError: `creator_id` is not an admin.
        ValidationError: Missing name, unknown status or a category that is
            not an active tourism category.
    """
    _require_admin(creator_id, 'create tourism places')
    name = _clean_name(data)

    status = data.get('status') or TOURISM.initial_status
    if status not in TOURISM.statuses:
        raise ValidationError(f"Unknown status '{status}' for tourism.", code='invalid')

    with store_errors('create tourism place'):
        _check_location(data)
        category_id = data.get('category_id')
        if category_id is not None and not Category.objects.filter(
            pk=category_id, feature_type=TOURISM.category_feature_type, is_active=True
        ).exists():
            raise ValidationError("Select an active tourism category.", code='invalid')

        place = _insert(
            TOURISM,
            name=name,
            slug=unique_slug(TOURISM.model, name),
            created_by_id=creator_id,
            status=status,
            published_at=timezone.now() if status == TOURISM.published_status else None,
            city_id=data.get('city_id'),
            area_id=data.get('area_id'),
            category_id=category_id,
            is_featured=bool(data.get('is_featured', False)),
            **{key: data[key] for key in TOURISM_FIELDS if key in data},
        )

    logger.info("Tourism place %s ('%s') created by admin %s", place.pk, place.slug, creator_id)
    return ListingResult(entity=place)


def _get_entity(family, entity_id):
    entity = family.model.objects.filter(pk=entity_id).first()
    if entity is None:
        raise NotFoundError(f"{family.label.capitalize()} not found.")
    return entity


def _apply_details(entity, data, fields):
    """Copies the editable fields present in `data` onto `entity`, returning their names."""
    if 'status' in data:
        raise ValidationError("The status is changed through the status endpoint.", code='invalid')

    changed = [key for key in fields if key in data]
    for key in changed:
        setattr(entity, key, data[key])
    if 'name' in data:
        # The slug stays, so existing links keep working after a rename.
        entity.name = _clean_name(data)
        changed.append('name')
    if 'city_id' in data or 'area_id' in data:
        location = {
            'city_id': data.get('city_id', entity.city_id),
            'area_id': data.get('area_id', entity.area_id),
        }
        _check_location(location)
        entity.city_id, entity.area_id = location['city_id'], location['area_id']
        changed += ['city', 'area']
    return changed


def update_business(actor_id, entity_id, data):
    """
    Changes the details of a business. Only its owner or an admin may do this.

    Display, contact and location fields can be changed; the slug and the
    status cannot. A `category_ids` list replaces the current category links
    the same way `create_business` writes them.

    Raises:
        NotFoundError: No such business.
        AuthorizationError: `actor_id` neither owns the business nor is an admin.
        ValidationError: Empty name, bad location or an attempt to set the status.
    """
    with store_errors('update business'):
        business = _get_entity(BUSINESS, entity_id)
        if not (is_owner(actor_id, entity_id, BUSINESS) or is_admin(actor_id)):
            logger.warning("User %s tried to edit business %s they do not own", actor_id, entity_id)
            raise AuthorizationError("Only the owner of this business can edit it.")

        changed = _apply_details(business, data, BUSINESS_FIELDS)
        warnings = []
        with transaction.atomic():
            if changed:
                business.save(update_fields=changed + ['updated_at'])
            if 'category_ids' in data:
                business.category_links.all().delete()
                warnings = _link_categories(business, data['category_ids'] or [])

    logger.info("Business %s updated by user %s (%s)", business.pk, actor_id, ', '.join(changed) or 'categories')
    return ListingResult(entity=business, warnings=warnings)


def update_tourism_place(actor_id, entity_id, data):
    """
    Changes the details of a tourism place. Admins only.

    Raises:
        AuthorizationError: `actor_id` is not an admin.
        NotFoundError: No such place.
        ValidationError: Empty name, bad location, a category that is not an
            active tourism category or an attempt to set the status.
    """
    _require_admin(actor_id, 'edit tourism places')

    with store_errors('update tourism place'):
        place = _get_entity(TOURISM, entity_id)
        changed = _apply_details(place, data, TOURISM_FIELDS + ('is_featured',))
        if 'category_id' in data:
            category_id = data['category_id']
            if category_id is not None and not Category.objects.filter(
                pk=category_id, feature_type=TOURISM.category_feature_type, is_active=True
            ).exists():
                raise ValidationError("Select an active tourism category.", code='invalid')
            place.category_id = category_id
            changed.append('category')
        if changed:
            place.save(update_fields=changed + ['updated_at'])

    logger.info("Tourism place %s updated by admin %s", place.pk, actor_id)
    return ListingResult(entity=place)


def delete_listing(family, entity_id, actor_id):
    """
    Deletes an entity for good. Admins only.

    Its reviews, replies, category links and gallery images go with it.

    Raises:
        AuthorizationError: `actor_id` is not an admin.
        NotFoundError: No such entity.
    """
    _require_admin(actor_id, 'delete listings')

    with store_errors(f'delete {family.key}'):
        deleted, _ = family.model.objects.filter(pk=entity_id).delete()
    if not deleted:
        raise NotFoundError(f"{family.label.capitalize()} not found.")

    logger.info("%s %s deleted by admin %s", family.key, entity_id, actor_id)


def set_status(family, entity_id, status, actor_id):
    """
    Moves an entity to another lifecycle status. Admins only.

    The first publication stamps `published_at`; later changes keep it.

    Raises:
        AuthorizationError: `actor_id` is not an admin.
        ValidationError: `status` is not a status of the family.
        NotFoundError: No such entity.
    """
    _require_admin(actor_id, 'change the status of listings')
    if status not in family.statuses:
        raise ValidationError(f"Unknown status '{status}' for {family.key}.", code='invalid')

    with store_errors(f'set {family.key} status'):
        entity = _get_entity(family, entity_id)
        previous = entity.status
        entity.status = status
        update_fields = ['status', 'updated_at']
        if status == family.published_status and entity.published_at is None:
            entity.published_at = timezone.now()
            update_fields.append('published_at')
        entity.save(update_fields=update_fields)

    logger.info("%s %s status changed from %s to %s by admin %s", family.key, entity.pk, previous, status, actor_id)
    return entity


def status_counts(family):
    """
    Counts the entities of a family per status.

    Returns:
        dict: `total` plus one key per status of the family, zero included.
    """
    with store_errors(f'count {family.key}'):
        rows = family.model.objects.values('status').annotate(count=Count('id')).order_by()
        counts = {status: 0 for status in family.statuses}
        for row in rows:
            counts[row['status']] = row['count']
    return {'total': sum(counts.values()), **counts}
