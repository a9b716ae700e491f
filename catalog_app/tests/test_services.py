from django.test import TestCase

from catalog_app import services
from catalog_app.families import BUSINESS, TOURISM
from catalog_app.models import Area, Business, BusinessCategory, Category, TourismImage, TourismPlace
from catalog_app.tests.helpers import make_business, make_category, make_city, make_place, make_review, make_user
from core.exceptions import AuthorizationError, NotFoundError, ValidationError
from user_auth_app.models import UserProfile
from user_auth_app.roles import get_role


class UniqueSlugTests(TestCase):

    def test_collisions_get_a_numeric_suffix(self):
        owner = make_user('owner')
        self.assertEqual(services.unique_slug(Business, 'City Palace Cafe'), 'city-palace-cafe')

        make_business(owner, 'City Palace Cafe')
        self.assertEqual(services.unique_slug(Business, 'City Palace Cafe'), 'city-palace-cafe-2')

        make_business(owner, 'City Palace Cafe 2')
        self.assertEqual(services.unique_slug(Business, 'City Palace Cafe'), 'city-palace-cafe-3')

    def test_slugs_are_unique_per_family_only(self):
        make_business(make_user('owner'), 'Lake Pichola')
        self.assertEqual(services.unique_slug(TourismPlace, 'Lake Pichola'), 'lake-pichola')


class CreateBusinessTests(TestCase):

    def setUp(self):
        self.user = make_user('newcomer')
        self.city = make_city('Udaipur')
        self.area = Area.objects.create(city=self.city, name='Old City', slug='old-city')
        self.cafes = make_category('Cafes')
        self.bakeries = make_category('Bakeries')
        self.forts = make_category('Forts', feature_type=Category.FeatureType.TOURISM)

    def test_business_starts_pending_and_promotes_the_owner(self):
        result = services.create_business(self.user.id, {
            'name': 'Lake View Cafe',
            'city_id': self.city.pk,
            'area_id': self.area.pk,
            'phone': '0294 123456',
            'category_ids': [self.cafes.pk, self.bakeries.pk],
        })

        business = result.entity
        self.assertEqual(business.status, Business.Status.PENDING)
        self.assertEqual(business.slug, 'lake-view-cafe')
        self.assertEqual(business.owner_id, self.user.id)
        self.assertEqual(business.phone, '0294 123456')
        self.assertEqual(result.warnings, [])
        self.assertTrue(result.promoted)
        self.assertEqual(get_role(self.user.id), UserProfile.Role.BUSINESS_OWNER)

        primary = BusinessCategory.objects.get(business=business, is_primary=True)
        self.assertEqual(primary.category, self.cafes)
        self.assertEqual(business.category_links.count(), 2)

    def test_second_business_does_not_promote_again(self):
        services.create_business(self.user.id, {'name': 'First', 'city_id': self.city.pk})
        result = services.create_business(self.user.id, {'name': 'Second', 'city_id': self.city.pk})

        self.assertFalse(result.promoted)
        self.assertEqual(get_role(self.user.id), UserProfile.Role.BUSINESS_OWNER)

    def test_admin_keeps_the_admin_role(self):
        admin = make_user('admin', role=UserProfile.Role.ADMIN)
        services.create_business(admin.id, {'name': 'Admin Cafe', 'city_id': self.city.pk})
        self.assertEqual(get_role(admin.id), UserProfile.Role.ADMIN)

    def test_unusable_categories_become_warnings(self):
        result = services.create_business(self.user.id, {
            'name': 'Lake View Cafe',
            'city_id': self.city.pk,
            'category_ids': [self.forts.pk, self.cafes.pk, 9999],
        })

        self.assertEqual(len(result.warnings), 2)
        self.assertEqual(list(result.entity.category_links.values_list('category_id', flat=True)), [self.cafes.pk])

    def test_name_is_required(self):
        with self.assertRaises(ValidationError) as cm:
            services.create_business(self.user.id, {'name': '  ', 'city_id': self.city.pk})
        self.assertEqual(cm.exception.code, 'required')

    def test_area_must_lie_in_the_city(self):
        jaipur = make_city('Jaipur')
        with self.assertRaises(ValidationError):
            services.create_business(self.user.id, {'name': 'X', 'city_id': jaipur.pk, 'area_id': self.area.pk})
        self.assertFalse(Business.objects.exists())


class CreateTourismPlaceTests(TestCase):

    def setUp(self):
        self.admin = make_user('admin', role=UserProfile.Role.ADMIN)
        self.city = make_city('Chittorgarh')
        self.forts = make_category('Forts', feature_type=Category.FeatureType.TOURISM)
        self.cafes = make_category('Cafes')

    def test_admin_creates_a_draft(self):
        place = services.create_tourism_place(self.admin.id, {
            'name': 'Chittorgarh Fort',
            'city_id': self.city.pk,
            'category_id': self.forts.pk,
            'entry_fee': 'Rs 40',
        }).entity

        self.assertEqual(place.status, TourismPlace.Status.DRAFT)
        self.assertEqual(place.created_by_id, self.admin.id)
        self.assertEqual(place.entry_fee, 'Rs 40')
        self.assertIsNone(place.published_at)

    def test_place_created_as_published_is_stamped(self):
        place = services.create_tourism_place(
            self.admin.id, {'name': 'Vijay Stambh', 'city_id': self.city.pk, 'status': 'published'}
        ).entity
        self.assertIsNotNone(place.published_at)

    def test_regular_users_cannot_create_places(self):
        owner = make_user('owner', role=UserProfile.Role.BUSINESS_OWNER)
        with self.assertRaises(AuthorizationError):
            services.create_tourism_place(owner.id, {'name': 'Fort', 'city_id': self.city.pk})

    def test_category_must_be_a_tourism_category(self):
        with self.assertRaises(ValidationError):
            services.create_tourism_place(
                self.admin.id, {'name': 'Fort', 'city_id': self.city.pk, 'category_id': self.cafes.pk}
            )


class SetStatusTests(TestCase):

    def setUp(self):
        self.admin = make_user('admin', role=UserProfile.Role.ADMIN)
        self.owner = make_user('owner', role=UserProfile.Role.BUSINESS_OWNER)
        self.business = make_business(self.owner, 'Lake View Cafe', status=Business.Status.PENDING)

    def test_first_publication_stamps_published_at(self):
        business = services.set_status(BUSINESS, self.business.pk, 'published', self.admin.id)
        first_published = business.published_at
        self.assertIsNotNone(first_published)

        services.set_status(BUSINESS, self.business.pk, 'suspended', self.admin.id)
        business = services.set_status(BUSINESS, self.business.pk, 'published', self.admin.id)

        self.assertEqual(business.published_at, first_published)

    def test_owner_cannot_change_status(self):
        with self.assertRaises(AuthorizationError):
            services.set_status(BUSINESS, self.business.pk, 'published', self.owner.id)
        self.business.refresh_from_db()
        self.assertEqual(self.business.status, Business.Status.PENDING)

    def test_status_must_belong_to_the_family(self):
        with self.assertRaises(ValidationError):
            services.set_status(BUSINESS, self.business.pk, 'draft', self.admin.id)
        with self.assertRaises(NotFoundError):
            services.set_status(TOURISM, 9999, 'draft', self.admin.id)


class StatusCountsTests(TestCase):

    def test_counts_every_status(self):
        owner = make_user('owner')
        make_business(owner, 'A')
        make_business(owner, 'B')
        make_business(owner, 'C', status=Business.Status.PENDING)
        make_place(owner, 'Fort', status=TourismPlace.Status.DRAFT)

        self.assertEqual(
            services.status_counts(BUSINESS),
            {'total': 3, 'pending': 1, 'published': 2, 'rejected': 0, 'suspended': 0},
        )
        self.assertEqual(services.status_counts(TOURISM), {'total': 1, 'draft': 1, 'published': 0, 'rejected': 0})


class UpdateBusinessTests(TestCase):

    def setUp(self):
        self.owner = make_user('owner', role=UserProfile.Role.BUSINESS_OWNER)
        self.admin = make_user('admin', role=UserProfile.Role.ADMIN)
        self.stranger = make_user('stranger')
        self.city = make_city('Udaipur')
        self.cafes = make_category('Cafes')
        self.bakeries = make_category('Bakeries')
        self.business = make_business(
            self.owner, 'Lake View Cafe', status=Business.Status.PENDING, city=self.city, categories=[self.cafes]
        )

    def test_owner_edits_details_and_keeps_the_slug(self):
        result = services.update_business(self.owner.id, self.business.pk, {
            'name': 'Lake View Coffee House',
            'phone': '0294 654321',
            'website': 'https://lakeview.example.com',
        })

        business = Business.objects.get(pk=self.business.pk)
        self.assertEqual(result.warnings, [])
        self.assertEqual(business.name, 'Lake View Coffee House')
        self.assertEqual(business.slug, 'lake-view-cafe')
        self.assertEqual(business.phone, '0294 654321')
        self.assertEqual(business.status, Business.Status.PENDING)

    def test_category_list_replaces_the_links(self):
        result = services.update_business(
            self.owner.id, self.business.pk, {'category_ids': [self.bakeries.pk, 9999]}
        )

        self.assertEqual(len(result.warnings), 1)
        links = BusinessCategory.objects.filter(business=self.business)
        self.assertEqual([(link.category_id, link.is_primary) for link in links], [(self.bakeries.pk, True)])

    def test_admin_may_edit_any_business(self):
        services.update_business(self.admin.id, self.business.pk, {'address': 'Lake Palace Road'})
        self.business.refresh_from_db()
        self.assertEqual(self.business.address, 'Lake Palace Road')

    def test_strangers_cannot_edit(self):
        with self.assertRaises(AuthorizationError):
            services.update_business(self.stranger.id, self.business.pk, {'name': 'Mine now'})
        self.business.refresh_from_db()
        self.assertEqual(self.business.name, 'Lake View Cafe')

    def test_status_cannot_be_edited(self):
        with self.assertRaises(ValidationError):
            services.update_business(self.owner.id, self.business.pk, {'status': 'published'})
        self.business.refresh_from_db()
        self.assertEqual(self.business.status, Business.Status.PENDING)

    def test_invalid_changes_are_rejected(self):
        jaipur = make_city('Jaipur')
        area = Area.objects.create(city=self.city, name='Old City', slug='old-city')

        with self.assertRaises(ValidationError):
            services.update_business(self.owner.id, self.business.pk, {'name': ' '})
        with self.assertRaises(ValidationError):
            services.update_business(self.owner.id, self.business.pk, {'city_id': jaipur.pk, 'area_id': area.pk})
        with self.assertRaises(NotFoundError):
            services.update_business(self.owner.id, 9999, {'name': 'Ghost'})


class UpdateTourismPlaceTests(TestCase):

    def setUp(self):
        self.admin = make_user('admin', role=UserProfile.Role.ADMIN)
        self.forts = make_category('Forts', feature_type=Category.FeatureType.TOURISM)
        self.place = make_place(self.admin, 'Chittorgarh Fort')

    def test_admin_edits_visitor_information(self):
        services.update_tourism_place(
            self.admin.id, self.place.pk, {'timings': '9am - 6pm', 'category_id': self.forts.pk, 'is_featured': True}
        )

        self.place.refresh_from_db()
        self.assertEqual(self.place.timings, '9am - 6pm')
        self.assertEqual(self.place.category, self.forts)
        self.assertTrue(self.place.is_featured)

    def test_creator_who_lost_the_admin_role_cannot_edit(self):
        UserProfile.objects.filter(user=self.admin).update(role=UserProfile.Role.USER)
        with self.assertRaises(AuthorizationError):
            services.update_tourism_place(self.admin.id, self.place.pk, {'timings': 'Closed'})

    def test_category_must_be_a_tourism_category(self):
        cafes = make_category('Cafes')
        with self.assertRaises(ValidationError):
            services.update_tourism_place(self.admin.id, self.place.pk, {'category_id': cafes.pk})


class DeleteListingTests(TestCase):

    def setUp(self):
        self.admin = make_user('admin', role=UserProfile.Role.ADMIN)
        self.owner = make_user('owner', role=UserProfile.Role.BUSINESS_OWNER)

    def test_admin_deletes_business_with_its_reviews(self):
        business = make_business(self.owner, 'Lake View Cafe')
        make_review(make_user('reviewer'), 4, business=business)

        services.delete_listing(BUSINESS, business.pk, self.admin.id)

        self.assertFalse(Business.objects.filter(pk=business.pk).exists())
        self.assertFalse(business.reviews.exists())

    def test_admin_deletes_tourism_place_with_its_gallery(self):
        place = make_place(self.admin, 'City Palace')
        TourismImage.objects.create(place=place, url='https://cdn.example.com/palace.jpg')

        services.delete_listing(TOURISM, place.pk, self.admin.id)

        self.assertFalse(TourismPlace.objects.exists())
        self.assertFalse(TourismImage.objects.exists())

    def test_owners_cannot_delete(self):
        business = make_business(self.owner, 'Lake View Cafe')
        with self.assertRaises(AuthorizationError):
            services.delete_listing(BUSINESS, business.pk, self.owner.id)
        self.assertTrue(Business.objects.filter(pk=business.pk).exists())

    def test_unknown_entity(self):
        with self.assertRaises(NotFoundError):
            services.delete_listing(TOURISM, 9999, self.admin.id)
