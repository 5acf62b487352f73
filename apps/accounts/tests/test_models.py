"""
Account Model Tests
===================

Test Coverage:
1. Profile auto-creation (post_save signal)
2. Effective role resolution
3. Superuser role row
4. Display helpers

Run tests:
    python manage.py test apps.accounts.tests.test_models
"""

from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.core.cache import cache
from django.test import TestCase

from apps.accounts.models import UserProfile, UserRole, get_effective_role

User = get_user_model()


class UserProfileSignalTest(TestCase):

    def setUp(self):
        cache.clear()

    def test_profile_created_with_user(self):
        """Every new identity gets exactly one profile carrying its email"""
        user = User.objects.create_user(email='asha@tvs.test', password='testpass123')

        self.assertTrue(UserProfile.objects.filter(user=user).exists())
        self.assertEqual(user.profile.email, 'asha@tvs.test')
        self.assertEqual(user.profile.full_name, '')

    def test_saving_user_again_keeps_single_profile(self):
        user = User.objects.create_user(email='ravi@tvs.test', password='testpass123')
        user.is_staff = True
        user.save()

        self.assertEqual(UserProfile.objects.filter(user=user).count(), 1)

    def test_no_role_row_written_on_signup(self):
        user = User.objects.create_user(email='new@tvs.test', password='testpass123')
        self.assertFalse(UserRole.objects.filter(user=user).exists())


class EffectiveRoleTest(TestCase):

    def setUp(self):
        cache.clear()
        self.user = User.objects.create_user(email='role@tvs.test', password='testpass123')

    def test_missing_role_row_reads_as_user(self):
        self.assertEqual(get_effective_role(self.user), 'user')
        self.assertEqual(self.user.role, 'user')

    def test_role_row_value_is_used(self):
        UserRole.objects.create(user=self.user, role='salesman')
        user = User.objects.get(pk=self.user.pk)

        self.assertEqual(user.role, 'salesman')
        self.assertTrue(user.is_salesman())
        self.assertFalse(user.is_admin())

    def test_anonymous_has_no_role(self):
        self.assertIsNone(get_effective_role(AnonymousUser()))
        self.assertIsNone(get_effective_role(None))

    def test_superuser_gets_admin_role(self):
        admin = User.objects.create_superuser(email='root@tvs.test', password='testpass123')

        self.assertEqual(UserRole.objects.get(user=admin).role, 'admin')
        self.assertTrue(admin.is_admin())

    def test_superuser_without_role_row_reads_as_admin(self):
        root = User.objects.create_user(email='root2@tvs.test', password='testpass123', is_superuser=True, is_staff=True)

        self.assertFalse(UserRole.objects.filter(user=root).exists())
        self.assertEqual(get_effective_role(root), 'admin')

    def test_role_row_wins_over_superuser_flag(self):
        root = User.objects.create_user(email='root3@tvs.test', password='testpass123', is_superuser=True)
        UserRole.objects.create(user=root, role='salesman')

        self.assertEqual(get_effective_role(User.objects.get(pk=root.pk)), 'salesman')

    def test_create_user_requires_email(self):
        with self.assertRaises(ValueError):
            User.objects.create_user(email='', password='testpass123')


class UserDisplayTest(TestCase):

    def setUp(self):
        cache.clear()
        self.user = User.objects.create_user(email='meera@tvs.test', password='testpass123')

    def test_full_name_falls_back_to_email(self):
        self.assertEqual(self.user.get_full_name(), 'meera@tvs.test')
        self.assertEqual(self.user.get_initials(), 'M')

    def test_full_name_from_profile(self):
        self.user.profile.full_name = 'Meera Nair'
        self.user.profile.save()

        self.assertEqual(self.user.get_full_name(), 'Meera Nair')
        self.assertEqual(self.user.get_short_name(), 'Meera')
        self.assertEqual(self.user.get_initials(), 'MN')
        self.assertEqual(self.user.profile.display_name, 'Meera Nair')
