from django.contrib.auth.models import User
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from catalog_app.families import BUSINESS, TOURISM
from catalog_app.tests.helpers import make_business, make_place, make_user
from core.exceptions import NotFoundError, ValidationError
from user_auth_app import roles
from user_auth_app.models import UserProfile

Role = UserProfile.Role


class RoleResolverTests(TestCase):
    """
    Test suite for `user_auth_app.roles`, the only writer of role state.
    """

    def test_new_users_start_as_plain_users(self):
        user = User.objects.create_user(username='fresh', password='password123')
        self.assertEqual(roles.get_role(user.id), Role.USER)

    def test_user_without_profile_defaults_to_user(self):
        user = make_user('noprofile')
        UserProfile.objects.filter(user=user).delete()

        self.assertEqual(roles.get_role(user.id), Role.USER)
        self.assertFalse(roles.is_admin(user.id))

    def test_promotion_is_idempotent(self):
        user = make_user('owner')

        self.assertTrue(roles.promote_if_first_listing(user.id))
        self.assertFalse(roles.promote_if_first_listing(user.id))
        self.assertEqual(roles.get_role(user.id), Role.BUSINESS_OWNER)

    def test_promotion_never_touches_admins(self):
        admin = make_user('admin', role=Role.ADMIN)

        self.assertFalse(roles.promote_if_first_listing(admin.id))
        self.assertEqual(roles.get_role(admin.id), Role.ADMIN)

    def test_promotion_creates_a_missing_profile(self):
        user = make_user('noprofile')
        UserProfile.objects.filter(user=user).delete()

        self.assertTrue(roles.promote_if_first_listing(user.id))
        self.assertEqual(roles.get_role(user.id), Role.BUSINESS_OWNER)

    def test_set_role(self):
        user = make_user('someone')

        self.assertEqual(roles.set_role(user.id, 'admin'), Role.ADMIN)
        self.assertTrue(roles.is_admin(user.id))

        with self.assertRaises(ValidationError):
            roles.set_role(user.id, 'superuser')
        with self.assertRaises(NotFoundError):
            roles.set_role(9999, 'user')


class OwnershipTests(TestCase):

    def setUp(self):
        self.owner = make_user('owner', role=Role.BUSINESS_OWNER)
        self.admin = make_user('admin', role=Role.ADMIN)
        self.stranger = make_user('stranger')
        self.business = make_business(self.owner, 'Lake View Cafe')
        self.place = make_place(self.admin, 'City Palace')

    def test_owner_of_business(self):
        self.assertTrue(roles.is_owner(self.owner.id, self.business.pk, BUSINESS))
        self.assertFalse(roles.is_owner(self.stranger.id, self.business.pk, BUSINESS))

    def test_admins_are_not_implicit_owners(self):
        self.assertFalse(roles.is_owner(self.admin.id, self.business.pk, BUSINESS))

    def test_creator_of_tourism_place_is_its_owner(self):
        self.assertTrue(roles.is_owner(self.admin.id, self.place.pk, TOURISM))
        self.assertFalse(roles.is_owner(self.owner.id, self.place.pk, TOURISM))

    def test_unknown_entity_or_user(self):
        self.assertFalse(roles.is_owner(self.owner.id, 9999, BUSINESS))
        self.assertFalse(roles.is_owner(None, self.business.pk, BUSINESS))


class RoleEndpointTests(APITestCase):

    def setUp(self):
        self.admin = make_user('admin', role=Role.ADMIN)
        self.user = make_user('someone')
        self.url = reverse('user-role', kwargs={'pk': self.user.pk})

    def test_admin_can_change_roles(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.patch(self.url, {'role': 'business_owner'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'user_id': self.user.pk, 'role': 'business_owner'})

    def test_users_cannot_change_their_own_role(self):
        self.client.force_authenticate(user=self.user)

        response = self.client.patch(
            reverse('user-role', kwargs={'pk': self.user.pk}), {'role': 'admin'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(roles.get_role(self.user.id), Role.USER)

    def test_unknown_role_is_rejected(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.patch(self.url, {'role': 'superuser'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
