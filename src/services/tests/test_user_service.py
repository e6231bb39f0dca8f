"""Unit tests for user_service: list, full update, patch, delete, lookup."""

import unittest
from datetime import timedelta
from unittest.mock import patch

from adapter.fake.user_repository import FakeUserRepository
from domain.model.errors import (
    DuplicateEmailError,
    InvalidFormatError,
    NotFoundError,
    UnknownFieldError,
)
from domain.model.user import PhoneInput
from services import auth_service, user_service
from services.token_service import TokenCodec
from utils.config import Settings

SETTINGS = Settings(jwt_secret_key="unit-test-secret")
STRICT_PATCH_SETTINGS = Settings(jwt_secret_key="unit-test-secret", patch_validates_format=True)


class UserServiceTestCase(unittest.TestCase):

    def setUp(self):
        patcher = patch('services.auth_service.BCRYPT_ROUNDS', 4)
        patcher.start()
        self.addCleanup(patcher.stop)

        self.repo = FakeUserRepository()
        self.codec = TokenCodec(SETTINGS.jwt_secret_key, timedelta(seconds=1440))

    def _register(self, name='Ana', email='ana@example.com', phones=()):
        return auth_service.register(
            self.repo, self.codec, SETTINGS,
            name=name, email=email, password='Secret123', phones=phones,
        )

    def _update(self, user_id, settings=SETTINGS, **overrides):
        fields = dict(
            name='Ana Maria',
            email='ana@example.com',
            password='NewSecret9',
            active=True,
            phones=[],
        )
        fields.update(overrides)
        return user_service.update_user(self.repo, self.codec, settings, user_id, **fields)


class TestListAndFind(UserServiceTestCase):

    def test_list_empty_store(self):
        self.assertEqual(user_service.list_users(self.repo), [])

    def test_list_preserves_insertion_order(self):
        for i in range(3):
            self._register(name=f'User {i}', email=f'user{i}@example.com')

        users = user_service.list_users(self.repo)
        self.assertEqual([u.email for u in users], ['user0@example.com', 'user1@example.com', 'user2@example.com'])

    def test_find_by_email(self):
        user = self._register()

        self.assertEqual(user_service.find_by_email(self.repo, 'ana@example.com').id, user.id)
        self.assertIsNone(user_service.find_by_email(self.repo, 'nobody@example.com'))


class TestUpdateUser(UserServiceTestCase):

    def test_update_overwrites_fields_and_phones(self):
        user = self._register(phones=[PhoneInput('111', '1', '57')])

        updated = self._update(
            user.id,
            email='maria@example.com',
            active=False,
            phones=[PhoneInput('222', '2', '56'), PhoneInput('333', '3', '56')],
        )

        self.assertEqual(updated.name, 'Ana Maria')
        self.assertEqual(updated.email, 'maria@example.com')
        self.assertFalse(updated.active)
        self.assertIsNotNone(updated.updated_at)
        self.assertEqual(self.codec.subject(updated.token), 'maria@example.com')
        self.assertTrue(auth_service.verify_password('NewSecret9', updated.password_hash))

        stored = self.repo.get_by_id(user.id)
        self.assertEqual([p.number for p in stored.phones], ['222', '333'])
        self.assertTrue(all(p.user_id == user.id for p in stored.phones))

    def test_update_missing_user(self):
        with self.assertRaises(NotFoundError):
            self._update('does-not-exist')

    def test_update_keeping_own_email_is_allowed(self):
        """Resubmitting the current email is not a conflict; only other owners count."""
        user = self._register()

        updated = self._update(user.id, email='ana@example.com')

        self.assertEqual(updated.email, 'ana@example.com')

    def test_update_to_email_of_another_user(self):
        user = self._register()
        self._register(name='Bob', email='bob@example.com')

        with self.assertRaises(DuplicateEmailError):
            self._update(user.id, email='bob@example.com')

    def test_update_rejects_invalid_formats(self):
        user = self._register()

        with self.assertRaises(InvalidFormatError):
            self._update(user.id, email='not-an-email')
        with self.assertRaises(InvalidFormatError):
            self._update(user.id, password='weak')
        self.assertEqual(self.repo.get_by_id(user.id).name, 'Ana')


class TestPatchUser(UserServiceTestCase):

    def test_patch_active_only_leaves_other_fields(self):
        user = self._register(phones=[PhoneInput('111', '1', '57')])
        before = self.repo.get_by_id(user.id)

        with patch.object(self.codec, 'issue', return_value='reissued-token') as mock_issue:
            patched = user_service.patch_user(self.repo, self.codec, SETTINGS, user.id, {'activo': False})

        self.assertFalse(patched.active)
        self.assertEqual(patched.name, before.name)
        self.assertEqual(patched.email, before.email)
        self.assertEqual(patched.password_hash, before.password_hash)
        self.assertEqual(patched.phones, before.phones)
        self.assertIsNotNone(patched.updated_at)
        self.assertEqual(patched.token, 'reissued-token')
        mock_issue.assert_called_once_with('ana@example.com')
        self.assertEqual(self.repo.get_by_id(user.id).token, 'reissued-token')

    def test_patch_accepts_english_field_names(self):
        user = self._register()

        patched = user_service.patch_user(
            self.repo, self.codec, SETTINGS, user.id,
            {'name': 'Ana B', 'active': False},
        )

        self.assertEqual(patched.name, 'Ana B')
        self.assertFalse(patched.active)

    def test_patch_rehashes_password(self):
        user = self._register()

        patched = user_service.patch_user(self.repo, self.codec, SETTINGS, user.id, {'password': 'Other1234'})

        self.assertTrue(auth_service.verify_password('Other1234', patched.password_hash))
        self.assertFalse(auth_service.verify_password('Secret123', patched.password_hash))

    def test_patch_over_long_password_rejected_without_format_checks(self):
        user = self._register()
        before = self.repo.get_by_id(user.id)

        with self.assertRaises(InvalidFormatError):
            user_service.patch_user(
                self.repo, self.codec, SETTINGS, user.id,
                {'nombre': 'Changed', 'password': 'Aa1' + 'x' * 80},
            )

        stored = self.repo.get_by_id(user.id)
        self.assertEqual(stored.name, 'Ana')
        self.assertEqual(stored.password_hash, before.password_hash)

    def test_update_over_long_password_rejected(self):
        user = self._register()

        with self.assertRaises(InvalidFormatError):
            self._update(user.id, password='Aa1' + 'x' * 80)

    def test_patch_replaces_phones(self):
        user = self._register(phones=[PhoneInput('111', '1', '57')])

        patched = user_service.patch_user(
            self.repo, self.codec, SETTINGS, user.id,
            {'telefonos': [{'numero': '999', 'codigoCiudad': '9', 'codigoPais': '1'}]},
        )

        self.assertEqual(len(patched.phones), 1)
        self.assertEqual(patched.phones[0].number, '999')
        self.assertEqual(patched.phones[0].user_id, user.id)
        self.assertEqual(self.repo.get_by_id(user.id).phones[0].number, '999')

    def test_patch_email_reissues_token_for_new_email(self):
        user = self._register()

        patched = user_service.patch_user(self.repo, self.codec, SETTINGS, user.id, {'correo': 'new@example.com'})

        self.assertEqual(self.codec.subject(patched.token), 'new@example.com')

    def test_empty_patch_still_reissues_and_stamps(self):
        user = self._register()

        patched = user_service.patch_user(self.repo, self.codec, SETTINGS, user.id, {})

        self.assertIsNotNone(patched.updated_at)

    def test_unknown_field_changes_nothing(self):
        user = self._register()

        with self.assertRaises(UnknownFieldError) as ctx:
            user_service.patch_user(
                self.repo, self.codec, SETTINGS, user.id,
                {'nombre': 'Changed', 'role': 'admin'},
            )

        self.assertEqual(ctx.exception.field, 'role')
        stored = self.repo.get_by_id(user.id)
        self.assertEqual(stored.name, 'Ana')
        self.assertIsNone(stored.updated_at)

    def test_patch_missing_user(self):
        with self.assertRaises(NotFoundError):
            user_service.patch_user(self.repo, self.codec, SETTINGS, 'does-not-exist', {'activo': False})

    def test_patch_wrong_value_types(self):
        user = self._register()
        for updates in [
            {'activo': 'no'},
            {'nombre': 42},
            {'telefonos': 'not-a-list'},
            {'telefonos': [{'numero': '1'}]},
        ]:
            with self.subTest(updates=updates):
                with self.assertRaises(InvalidFormatError):
                    user_service.patch_user(self.repo, self.codec, SETTINGS, user.id, updates)

    def test_patch_skips_format_checks_by_default(self):
        user = self._register()

        patched = user_service.patch_user(
            self.repo, self.codec, SETTINGS, user.id,
            {'correo': 'not-an-email', 'password': 'weak'},
        )

        self.assertEqual(patched.email, 'not-an-email')

    def test_patch_format_checks_when_enabled(self):
        user = self._register()
        self._register(name='Bob', email='bob@example.com')

        with self.assertRaises(InvalidFormatError):
            user_service.patch_user(self.repo, self.codec, STRICT_PATCH_SETTINGS, user.id, {'correo': 'not-an-email'})
        with self.assertRaises(InvalidFormatError):
            user_service.patch_user(self.repo, self.codec, STRICT_PATCH_SETTINGS, user.id, {'password': 'weak'})
        with self.assertRaises(DuplicateEmailError):
            user_service.patch_user(self.repo, self.codec, STRICT_PATCH_SETTINGS, user.id, {'correo': 'bob@example.com'})

        patched = user_service.patch_user(
            self.repo, self.codec, STRICT_PATCH_SETTINGS, user.id, {'correo': 'ana@example.com'},
        )
        self.assertEqual(patched.email, 'ana@example.com')


class TestDeleteUser(UserServiceTestCase):

    def test_delete_existing_user(self):
        user = self._register(phones=[PhoneInput('111', '1', '57')])

        self.assertTrue(user_service.delete_user(self.repo, user.id))
        self.assertIsNone(self.repo.get_by_id(user.id))

    def test_delete_missing_user_reports_false(self):
        self.assertFalse(user_service.delete_user(self.repo, 'does-not-exist'))


if __name__ == '__main__':
    unittest.main()
