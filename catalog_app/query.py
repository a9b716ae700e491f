"""
The catalog query engine.

One algorithm serves both entity families. A query runs in four steps, and
the order matters for the page counts to be right:

1. Predicates: status, search, city, area, owner and flag filters are applied
   to the queryset of the family's model.
2. Category scoping: a category slug is resolved to an id against the active
   categories of the family. Businesses are then intersected with the
   membership set read from the link table; tourism places are matched on
   their single category reference. This happens against the full filtered
   set, never against a single page.
3. Sorting: stable, in memory.
4. Pagination: slicing of the sorted list, followed by enrichment of the
   visible page with related names and rating summaries.
"""
import logging
import math
from dataclasses import dataclass
from typing import Optional

from django.conf import settings
from django.db import models

from core.exceptions import NotFoundError, ValidationError, store_errors
from reviews_app.ratings import rating_summaries
from user_auth_app.models import UserProfile
from user_auth_app.roles import is_admin
from .families import CATEGORY_SINGLE
from .models import Area, BusinessCategory, Category, City

logger = logging.getLogger(__name__)

STATUS_ALL = 'all'


class SortOrder(models.TextChoices):
    """The orderings a catalog listing supports."""
    NEWEST = 'newest', 'Newest first'
    NAME = 'name', 'Name (A-Z)'
    VERIFIED = 'verified', 'Verified first'
    FEATURED = 'featured', 'Featured first'


@dataclass(frozen=True)
class CatalogFilters:
    """
    The complete set of filters a catalog listing understands.

    All filters are optional and combined with AND. `None` (or an empty
    search string) means "do not filter on this".

    Attributes:
        status: An exact lifecycle status, or 'all' to skip the status filter.
        search: Case-insensitive substring of the entity name.
        city_id / area_id: Exact location match.
        category_id: Id of a category of this family.
        category_slug: Slug of an active category of this family. Mutually
            exclusive with `category_id`.
        owner_id: Owner (business) or creator (tourism place) of the entity.
        featured / verified: Exact match on the visibility flags.
    """
    status: str = STATUS_ALL
    search: str = ''
    city_id: Optional[int] = None
    area_id: Optional[int] = None
    category_id: Optional[int] = None
    category_slug: str = ''
    owner_id: Optional[int] = None
    featured: Optional[bool] = None
    verified: Optional[bool] = None

    def __post_init__(self):
        if self.category_id is not None and self.category_slug:
            raise ValidationError(
                "Filter by category id or by category slug, not both.", code='invalid_filter'
            )

    @property
    def is_category_scoped(self):
        return self.category_id is not None or bool(self.category_slug)


@dataclass
class CatalogPage:
    """One page of a catalog listing together with the numbers needed to page through it."""
    items: list
    page: int
    page_size: int
    total_count: int
    total_pages: int

    @property
    def has_next(self):
        return self.page < self.total_pages

    @property
    def has_previous(self):
        return self.page > 1


def apply_predicates(family, queryset, filters):
    """Step 1: narrows `queryset` down with every non-category filter."""
    if filters.status != STATUS_ALL:
        queryset = queryset.filter(status=filters.status)

    search = filters.search.strip()
    if search:
        queryset = queryset.filter(name__icontains=search)

    if filters.city_id is not None:
        queryset = queryset.filter(city_id=filters.city_id)
    if filters.area_id is not None:
        queryset = queryset.filter(area_id=filters.area_id)
    if filters.owner_id is not None:
        queryset = queryset.filter(**{f'{family.owner_field}_id': filters.owner_id})
    if filters.featured is not None:
        queryset = queryset.filter(is_featured=filters.featured)
    if filters.verified is not None:
        queryset = queryset.filter(is_verified=filters.verified)
    return queryset


def resolve_category_id(family, filters):
    """
    Returns the category id a listing is scoped to, or None.

    Slugs are resolved against the active categories of the family only. An
    unknown slug resolves to None, which the caller turns into an empty result.
    """
    if filters.category_slug:
        return Category.objects.filter(
            slug=filters.category_slug,
            feature_type=family.category_feature_type,
            is_active=True,
        ).values_list('id', flat=True).first()
    return filters.category_id


def scope_to_category(family, queryset, filters):
    """
    Step 2: applies the category filter and returns the full filtered list.

    For businesses the link table is read separately and intersected with the
    already filtered set, which keeps the count of the whole listing correct.
    """
    if not filters.is_category_scoped:
        return list(queryset)

    category_id = resolve_category_id(family, filters)
    if category_id is None:
        logger.debug("Category slug %r did not resolve for %s", filters.category_slug, family.key)
        return []

    if family.category_relation == CATEGORY_SINGLE:
        return list(queryset.filter(category_id=category_id))

    members = set(
        BusinessCategory.objects.filter(category_id=category_id).values_list('business_id', flat=True)
    )
    return [entity for entity in queryset if entity.pk in members]


def sort_entities(entities, sort=SortOrder.NEWEST):
    """
    Step 3: returns a new, sorted list.

    Every ordering starts from "newest first" and applies a stable sort on
    top of it, so ties always fall back to the creation time.
    """
    try:
        sort = SortOrder(sort)
    except ValueError:
        raise ValidationError(f"Unknown sort order '{sort}'.", code='invalid_filter') from None

    ordered = sorted(entities, key=lambda entity: (entity.created_at, entity.pk), reverse=True)
    if sort == SortOrder.NAME:
        ordered.sort(key=lambda entity: entity.name.casefold())
    elif sort == SortOrder.VERIFIED:
        ordered.sort(key=lambda entity: not entity.is_verified)
    elif sort == SortOrder.FEATURED:
        ordered.sort(key=lambda entity: not entity.is_featured)
    return ordered


def enrich_entities(family, entities):
    """
    Attaches related display data to each entity in place.

    Adds `city_name`, `area_name`, `category_names`, `creator_name` and
    `rating_summary`. Each kind of data is read with one secondary query for
    the whole list.
    """
    if not entities:
        return entities

    cities = City.objects.in_bulk({e.city_id for e in entities if e.city_id})
    areas = Area.objects.in_bulk({e.area_id for e in entities if e.area_id})
    owner_attr = f'{family.owner_field}_id'
    creators = UserProfile.display_names({getattr(e, owner_attr) for e in entities if getattr(e, owner_attr)})
    categories = _category_names(family, entities)
    summaries = rating_summaries(family, [e.pk for e in entities])

    for entity in entities:
        city = cities.get(entity.city_id)
        area = areas.get(entity.area_id)
        entity.city_name = city.name if city else None
        entity.area_name = area.name if area else None
        entity.category_names = categories.get(entity.pk, [])
        entity.creator_name = creators.get(getattr(entity, owner_attr))
        entity.rating_summary = summaries[entity.pk]
    return entities


def _category_names(family, entities):
    """Maps entity id -> list of category names, primary categories first."""
    if family.category_relation == CATEGORY_SINGLE:
        categories = Category.objects.in_bulk({e.category_id for e in entities if e.category_id})
        return {
            e.pk: [categories[e.category_id].name]
            for e in entities if e.category_id in categories
        }

    names = {}
    links = (
        BusinessCategory.objects
        .filter(business_id__in=[e.pk for e in entities])
        .select_related('category')
        .order_by('-is_primary', 'category__name')
    )
    for link in links:
        names.setdefault(link.business_id, []).append(link.category.name)
    return names


def list_catalog(family, filters=None, sort=SortOrder.NEWEST, page=1, page_size=None):
    """
    Lists one page of catalog entities.

    Args:
        family (CatalogFamily): Which entities to list.
        filters (CatalogFilters): Conjunctive filters; defaults to no filtering.
        sort (str): One of `SortOrder`.
        page (int): 1-based page number. Pages past the end come back empty.
        page_size (int): Defaults to the `CATALOG_PAGE_SIZE` setting.

    Returns:
        CatalogPage: The enriched entities of the page and the paging totals.

    Raises:
        ValidationError: Unknown status or sort order, page or page size below 1.
        StoreError: The database could not be reached.
    """
    filters = filters or CatalogFilters()
    if page_size is None:
        page_size = settings.CATALOG_PAGE_SIZE

    if filters.status != STATUS_ALL and filters.status not in family.statuses:
        raise ValidationError(
            f"Unknown status '{filters.status}' for {family.key}.", code='invalid_filter'
        )
    if page < 1 or page_size < 1:
        raise ValidationError("Page and page size must be at least 1.", code='invalid_page')

    with store_errors(f'list {family.key} catalog'):
        queryset = apply_predicates(family, family.model.objects.all(), filters)
        entities = sort_entities(scope_to_category(family, queryset, filters), sort)

        total_count = len(entities)
        start = (page - 1) * page_size
        items = enrich_entities(family, entities[start:start + page_size])

    return CatalogPage(
        items=items,
        page=page,
        page_size=page_size,
        total_count=total_count,
        total_pages=math.ceil(total_count / page_size),
    )


def get_entity_by_slug(family, slug, viewer_id=None):
    """
    Returns a single enriched entity.

    Unpublished entities are only visible to their owner and to admins; for
    everybody else they do not exist.

    Raises:
        NotFoundError: No entity with this slug is visible to `viewer_id`.
    """
    with store_errors(f'get {family.key}'):
        entity = family.model.objects.filter(slug=slug).first()
        if entity is None or not can_view(family, entity, viewer_id):
            raise NotFoundError(f"No {family.label} found for '{slug}'.")
        enrich_entities(family, [entity])
    return entity


def can_view(family, entity, viewer_id):
    """Published entities are public; anything else needs the owner or an admin."""
    if entity.status == family.published_status:
        return True
    if viewer_id is None:
        return False
    return getattr(entity, f'{family.owner_field}_id') == viewer_id or is_admin(viewer_id)
