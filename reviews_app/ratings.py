"""
Rating aggregation.

`summarize_ratings` is a pure function over a list of star ratings. The two
helpers below it read the live set of visible reviews (published and not
deleted) and summarise it; nothing is cached, so a summary always reflects
the latest accepted change.
"""
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP

from core.exceptions import store_errors
from .models import Review

STARS = (1, 2, 3, 4, 5)


def empty_distribution():
    return {star: 0 for star in STARS}


@dataclass(frozen=True)
class RatingSummary:
    total_reviews: int = 0
    average_rating: float = 0.0
    rating_distribution: dict = field(default_factory=empty_distribution)


def summarize_ratings(ratings):
    """
    Computes count, average and star distribution of `ratings`.

    The average is rounded half-up to one decimal (4.65 -> 4.7), and is 0 for
    an empty list.

    Raises:
        ValueError: A rating outside 1-5. Such a value can only come from a
            broken write path and is never silently skipped.
    """
    distribution = empty_distribution()
    for rating in ratings:
        if rating not in distribution:
            raise ValueError(f"Rating {rating!r} is outside the range 1-5.")
        distribution[rating] += 1

    total = sum(distribution.values())
    if total == 0:
        return RatingSummary()

    mean = Decimal(sum(star * count for star, count in distribution.items())) / Decimal(total)
    average = float(mean.quantize(Decimal('0.1'), rounding=ROUND_HALF_UP))
    return RatingSummary(total_reviews=total, average_rating=average, rating_distribution=distribution)


def visible_reviews():
    """Reviews every read path may show: published and not soft-deleted."""
    return Review.objects.filter(status=Review.Status.PUBLISHED, is_deleted=False)


def get_rating_summary(family, entity_id):
    """Summarises the visible reviews of one entity."""
    with store_errors('rating summary'):
        ratings = list(
            visible_reviews().filter(**{f'{family.review_field}_id': entity_id}).values_list('rating', flat=True)
        )
    return summarize_ratings(ratings)


def rating_summaries(family, entity_ids):
    """
    Summarises the visible reviews of many entities with a single query.

    Returns:
        dict: entity id -> RatingSummary. Every requested id is present, ids
        without reviews map to an empty summary.
    """
    column = f'{family.review_field}_id'
    grouped = {entity_id: [] for entity_id in entity_ids}
    rows = visible_reviews().filter(**{f'{column}__in': list(grouped)}).values_list(column, 'rating')
    for entity_id, rating in rows:
        grouped[entity_id].append(rating)
    return {entity_id: summarize_ratings(ratings) for entity_id, ratings in grouped.items()}
