"""Small builders for test data shared by the test suites of several apps."""
from datetime import timedelta

from django.contrib.auth.models import User
from django.utils import timezone
from django.utils.text import slugify

from catalog_app.models import Business, BusinessCategory, Category, City, TourismPlace
from reviews_app.models import Review
from user_auth_app.models import UserProfile


def make_user(username, role=UserProfile.Role.USER, full_name=''):
    """Creates a user; the signal creates the profile, the role is set afterwards."""
    user = User.objects.create_user(username=username, password='password123')
    UserProfile.objects.filter(user=user).update(role=role, full_name=full_name)
    return user


def make_city(name='Udaipur', state='Rajasthan'):
    return City.objects.create(name=name, slug=slugify(name), state=state)


def make_category(name, feature_type=Category.FeatureType.BUSINESS, is_active=True):
    return Category.objects.create(name=name, slug=slugify(name), feature_type=feature_type, is_active=is_active)


def _age(entity, minutes_ago):
    # created_at is auto_now_add, so an explicit age has to be written afterwards.
    type(entity).objects.filter(pk=entity.pk).update(created_at=timezone.now() - timedelta(minutes=minutes_ago))
    entity.refresh_from_db()
    return entity


def make_business(owner, name, status=Business.Status.PUBLISHED, minutes_ago=0, categories=(), **fields):
    business = Business.objects.create(name=name, slug=slugify(name), owner=owner, status=status, **fields)
    for position, category in enumerate(categories):
        BusinessCategory.objects.create(business=business, category=category, is_primary=position == 0)
    return _age(business, minutes_ago)


def make_place(creator, name, status=TourismPlace.Status.PUBLISHED, minutes_ago=0, **fields):
    place = TourismPlace.objects.create(name=name, slug=slugify(name), created_by=creator, status=status, **fields)
    return _age(place, minutes_ago)


def make_review(user, rating, business=None, tourism_place=None, **fields):
    fields.setdefault('content', 'Nice place.')
    return Review.objects.create(
        user=user, rating=rating, business=business, tourism_place=tourism_place, **fields
    )
