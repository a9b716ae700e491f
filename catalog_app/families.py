"""
Descriptors for the two catalog entity families.

Businesses and tourism places are filtered, sorted, paginated and reviewed by
the same code. Everything that differs between them is collected in one
`CatalogFamily` instance, so the shared code never branches on the model class.
"""
from dataclasses import dataclass

from core.exceptions import NotFoundError
from .models import Business, Category, TourismPlace

CATEGORY_MANY = 'many'
CATEGORY_SINGLE = 'single'


@dataclass(frozen=True)
class CatalogFamily:
    """
    Attributes:
        key: Public name of the family, used in URLs and API payloads.
        model: The Django model holding the entities.
        statuses: Every lifecycle status the family knows.
        initial_status: Status of a freshly created entity.
        published_status: Status of entities visible to everybody.
        owner_field: Foreign key pointing at the owning (or creating) user.
        category_relation: CATEGORY_MANY (link table) or CATEGORY_SINGLE (one FK).
        category_feature_type: `Category.feature_type` of this family's categories.
        review_field: Name of the foreign key on `Review` pointing at this family.
    """
    key: str
    model: type
    statuses: tuple
    initial_status: str
    published_status: str
    owner_field: str
    category_relation: str
    category_feature_type: str
    review_field: str

    @property
    def label(self):
        return self.model._meta.verbose_name


BUSINESS = CatalogFamily(
    key='business',
    model=Business,
    statuses=tuple(Business.Status.values),
    initial_status=Business.Status.PENDING,
    published_status=Business.Status.PUBLISHED,
    owner_field='owner',
    category_relation=CATEGORY_MANY,
    category_feature_type=Category.FeatureType.BUSINESS,
    review_field='business',
)

TOURISM = CatalogFamily(
    key='tourism',
    model=TourismPlace,
    statuses=tuple(TourismPlace.Status.values),
    initial_status=TourismPlace.Status.DRAFT,
    published_status=TourismPlace.Status.PUBLISHED,
    owner_field='created_by',
    category_relation=CATEGORY_SINGLE,
    category_feature_type=Category.FeatureType.TOURISM,
    review_field='tourism_place',
)

FAMILIES = {family.key: family for family in (BUSINESS, TOURISM)}


def get_family(key):
    """Looks up a family by its public key, raising `NotFoundError` for unknown keys."""
    try:
        return FAMILIES[key]
    except KeyError:
        raise NotFoundError(f"Unknown catalog family '{key}'.") from None
