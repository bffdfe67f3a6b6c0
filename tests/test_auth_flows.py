"""Tests for role computation, login and the self-service profile update policy."""

import unittest
from types import SimpleNamespace
from unittest.mock import MagicMock

from app.core.errors import BadRequest, Conflict, NotFound, Unauthorized
from app.core.security import decode_token, verify_password
from app.schemas.auth import AuthContext, ProfileUpdateRequest
from app.services.admins import AdminRepository
from app.services.auth import authenticate, compute_role, is_owner, update_profile
from tests.support import (
    ADMIN_PASSWORD,
    OWNER_PASSWORD,
    SECRET,
    DatabaseTestCase,
    auth_config,
)


class TestComputeRole(unittest.TestCase):
    def test_default_owner_is_id_1(self) -> None:
        config = auth_config()
        self.assertEqual(compute_role(SimpleNamespace(id=1, email="a@x.io"), config), "Owner")
        self.assertEqual(compute_role(SimpleNamespace(id=2, email="a@x.io"), config), "admin")

    def test_owner_email_narrows_match(self) -> None:
        config = auth_config(owner_id=3, owner_email="boss@x.io")
        self.assertTrue(is_owner(3, "BOSS@x.io", config))
        self.assertFalse(is_owner(3, "other@x.io", config))
        self.assertFalse(is_owner(4, "boss@x.io", config))

    def test_non_integer_id_never_matches(self) -> None:
        self.assertFalse(is_owner("1", None, auth_config()))


class TestAuthenticate(DatabaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.repo = AdminRepository(self.db)
        self.config = auth_config()

    def test_owner_login(self) -> None:
        result = authenticate(self.repo, "owner@catalog.io", OWNER_PASSWORD, self.config)
        self.assertEqual(result.role, "Owner")
        claims = decode_token(result.token, SECRET)
        self.assertEqual(claims["id"], self.owner.id)
        self.assertEqual(claims["email"], "owner@catalog.io")
        self.assertEqual(claims["userType"], "Owner")

    def test_admin_login_and_email_case_insensitive(self) -> None:
        result = authenticate(self.repo, " Staff@Catalog.io ", ADMIN_PASSWORD, self.config)
        self.assertEqual(result.role, "admin")

    def test_login_by_username(self) -> None:
        result = authenticate(self.repo, "staff", ADMIN_PASSWORD, auth_config(label_field="username"))
        self.assertEqual(decode_token(result.token, SECRET)["username"], "staff")

    def test_wrong_password_and_unknown_user_share_message(self) -> None:
        with self.assertRaises(Unauthorized) as wrong:
            authenticate(self.repo, "staff@catalog.io", "nope", self.config)
        with self.assertRaises(Unauthorized) as unknown:
            authenticate(self.repo, "ghost@catalog.io", "nope", self.config)
        self.assertEqual(wrong.exception.message, unknown.exception.message)
        self.assertNotIn("password", wrong.exception.message.lower())

    def test_lookup_uses_configured_field(self) -> None:
        repo = MagicMock()
        repo.find_by_identifier.return_value = None
        with self.assertRaises(Unauthorized):
            authenticate(repo, "staff", "x", auth_config(label_field="username"))
        repo.find_by_identifier.assert_called_once_with("username", "staff")


class TestUpdateProfile(DatabaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.repo = AdminRepository(self.db)
        self.config = auth_config()
        self.staff_ctx = AuthContext(id=self.admin.id, label=self.admin.email, email=self.admin.email, role="admin")

    def _update(self, ctx: AuthContext | None = None, config=None, **changes):
        return update_profile(
            self.repo,
            ctx or self.staff_ctx,
            ProfileUpdateRequest(**changes),
            config or self.config,
        )

    def test_wrong_current_password_leaves_record_untouched(self) -> None:
        before = self.fetch_admin(self.admin.id)
        with self.assertRaises(Unauthorized) as ctx:
            self._update(email="new@catalog.io", new_password="Fresh!Pass9", current_password="wrong")
        self.assertEqual(ctx.exception.message, "Current password is incorrect.")
        after = self.fetch_admin(self.admin.id)
        self.assertEqual(after.password_hash, before.password_hash)
        self.assertEqual(after.email, "staff@catalog.io")

    def test_current_password_required_for_changes(self) -> None:
        with self.assertRaises(BadRequest):
            self._update(new_password="Fresh!Pass9")

    def test_nothing_supplied_is_noop(self) -> None:
        result = self._update()
        self.assertIsNone(result.token)
        self.assertEqual(result.admin.email, "staff@catalog.io")

    def test_password_only_change_issues_no_token(self) -> None:
        result = self._update(new_password="Fresh!Pass9", current_password=ADMIN_PASSWORD)
        self.assertIsNone(result.token)
        stored = self.fetch_admin(self.admin.id)
        self.assertTrue(verify_password("Fresh!Pass9", stored.password_hash))
        self.assertFalse(verify_password(ADMIN_PASSWORD, stored.password_hash))

    def test_unchanged_email_issues_no_token(self) -> None:
        result = self._update(email="staff@catalog.io", current_password=ADMIN_PASSWORD)
        self.assertIsNone(result.token)

    def test_email_change_issues_token_with_new_claims(self) -> None:
        result = self._update(email="Renamed@Catalog.io", current_password=ADMIN_PASSWORD)
        self.assertIsNotNone(result.token)
        claims = decode_token(result.token, SECRET)
        self.assertEqual(claims["email"], "renamed@catalog.io")
        self.assertEqual(claims["userType"], "admin")
        self.assertEqual(self.fetch_admin(self.admin.id).email, "renamed@catalog.io")

    def test_owner_email_change_recomputes_role(self) -> None:
        owner_ctx = AuthContext(id=1, label="owner@catalog.io", email="owner@catalog.io", role="Owner")
        result = self._update(
            ctx=owner_ctx, email="chief@catalog.io", current_password=OWNER_PASSWORD
        )
        self.assertEqual(decode_token(result.token, SECRET)["userType"], "Owner")

        # With a pinned Owner email, moving off it drops the Owner role.
        pinned = auth_config(owner_email="chief@catalog.io")
        result = self._update(
            ctx=owner_ctx, config=pinned, email="elsewhere@catalog.io", current_password=OWNER_PASSWORD
        )
        self.assertEqual(decode_token(result.token, SECRET)["userType"], "admin")

    def test_username_change_issues_token(self) -> None:
        result = self._update(username="staff.two", current_password=ADMIN_PASSWORD)
        self.assertEqual(decode_token(result.token, SECRET)["username"], "staff.two")

    def test_email_conflict_leaves_both_records_unchanged(self) -> None:
        with self.assertRaises(Conflict) as ctx:
            self._update(email="owner@catalog.io", current_password=ADMIN_PASSWORD)
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(self.fetch_admin(self.admin.id).email, "staff@catalog.io")
        self.assertEqual(self.fetch_admin(self.owner.id).email, "owner@catalog.io")

    def test_username_conflict(self) -> None:
        with self.assertRaises(Conflict):
            self._update(username="owner", current_password=ADMIN_PASSWORD)

    def test_missing_record(self) -> None:
        ghost = AuthContext(id=99, label="ghost@catalog.io", email="ghost@catalog.io", role="admin")
        with self.assertRaises(NotFound):
            self._update(ctx=ghost, email="x@catalog.io", current_password="whatever")


if __name__ == "__main__":
    unittest.main()
