"""Tests for app.services.sessions: token validation order and session-epoch supersession."""

import unittest
from datetime import timedelta

import jwt

from app.core.config import settings
from app.core.exceptions import (
    AccountBanned,
    BadCredentials,
    InvalidToken,
    SessionSuperseded,
    TokenExpired,
    UserNotFound,
    ValidationError,
)
from app.core.security import create_access_token
from app.models import User
from app.models.user import ROLE_USER, STATUS_ACTIVE, STATUS_BANNED
from app.services import sessions
from app.services.credentials import create_user
from tests.support import DatabaseTestCase


class TestValidateToken(DatabaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user = create_user(self.db, "alice", "secret1", ROLE_USER)

    def test_fresh_user_token_is_valid(self) -> None:
        token = sessions.issue_token(self.user)
        self.assertEqual(sessions.validate_token(self.db, token).id, self.user.id)

    def test_malformed_token(self) -> None:
        with self.assertRaises(InvalidToken):
            sessions.validate_token(self.db, "not.a.jwt")

    def test_wrong_signature(self) -> None:
        token = jwt.encode(
            {"sub": str(self.user.id), "epoch": 0, "exp": 9999999999},
            "someone-elses-secret",
            algorithm="HS256",
        )
        with self.assertRaises(InvalidToken):
            sessions.validate_token(self.db, token)

    def test_missing_epoch_claim(self) -> None:
        token = jwt.encode(
            {"sub": str(self.user.id), "exp": 9999999999},
            settings.JWT_SECRET.get_secret_value(),
            algorithm=settings.JWT_ALGORITHM,
        )
        with self.assertRaises(InvalidToken):
            sessions.validate_token(self.db, token)

    def test_expired(self) -> None:
        token = create_access_token(
            sub=self.user.id, role="user", epoch=0, expires_delta=timedelta(seconds=-1)
        )
        with self.assertRaises(TokenExpired):
            sessions.validate_token(self.db, token)

    def test_unknown_user(self) -> None:
        token = create_access_token(sub=9999, role="user", epoch=0)
        with self.assertRaises(UserNotFound):
            sessions.validate_token(self.db, token)

    def test_banned_user(self) -> None:
        token = sessions.issue_token(self.user)
        self.db.query(User).filter(User.id == self.user.id).update({"status": STATUS_BANNED})
        self.db.commit()
        with self.assertRaises(AccountBanned):
            sessions.validate_token(self.db, token)

    def test_stale_epoch_is_superseded(self) -> None:
        token = sessions.issue_token(self.user)
        sessions.invalidate_session(self.db, self.user.id)
        with self.assertRaises(SessionSuperseded):
            sessions.validate_token(self.db, token)


class TestInvalidateSession(DatabaseTestCase):
    def test_increments_by_one_each_call(self) -> None:
        user = create_user(self.db, "bob", "secret1", ROLE_USER)
        self.assertEqual(user.session_epoch, 0)
        self.assertEqual(sessions.invalidate_session(self.db, user.id), 1)
        self.assertEqual(sessions.invalidate_session(self.db, user.id), 2)
        self.db.refresh(user)
        self.assertEqual(user.session_epoch, 2)

    def test_applies_extra_changes_in_same_update(self) -> None:
        user = create_user(self.db, "bob", "secret1", ROLE_USER)
        sessions.invalidate_session(self.db, user.id, status=STATUS_BANNED)
        self.db.refresh(user)
        self.assertEqual(user.status, STATUS_BANNED)
        self.assertEqual(user.session_epoch, 1)

    def test_deleted_user_raises_user_not_found(self) -> None:
        user = create_user(self.db, "bob", "secret1", ROLE_USER)
        user_id = user.id
        self.db.delete(user)
        self.db.commit()
        with self.assertRaises(UserNotFound):
            sessions.invalidate_session(self.db, user_id)

    def test_bump_epoch_respects_extra_criteria(self) -> None:
        user = create_user(self.db, "bob", "secret1", ROLE_USER)
        self.assertIsNone(
            sessions.bump_epoch(self.db, user.id, User.status == STATUS_BANNED, status=STATUS_ACTIVE)
        )
        self.db.refresh(user)
        self.assertEqual(user.session_epoch, 0)


class TestLogin(DatabaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user = create_user(self.db, "alice", "secret1", ROLE_USER)

    def test_second_login_supersedes_first_token(self) -> None:
        first, _ = sessions.login(self.db, "alice", "secret1")
        second, _ = sessions.login(self.db, "alice", "secret1")
        with self.assertRaises(SessionSuperseded):
            sessions.validate_token(self.db, first)
        self.assertEqual(sessions.validate_token(self.db, second).username, "alice")

    def test_login_supersedes_registration_token(self) -> None:
        registration_token = sessions.issue_token(self.user)
        sessions.login(self.db, "alice", "secret1")
        with self.assertRaises(SessionSuperseded):
            sessions.validate_token(self.db, registration_token)

    def test_wrong_password(self) -> None:
        with self.assertRaises(BadCredentials):
            sessions.login(self.db, "alice", "wrong-password")

    def test_unknown_username(self) -> None:
        with self.assertRaises(BadCredentials):
            sessions.login(self.db, "nobody", "secret1")

    def test_missing_fields(self) -> None:
        with self.assertRaises(ValidationError):
            sessions.login(self.db, "alice", None)

    def test_banned_user_cannot_login(self) -> None:
        self.db.query(User).filter(User.id == self.user.id).update({"status": STATUS_BANNED})
        self.db.commit()
        with self.assertRaises(AccountBanned):
            sessions.login(self.db, "alice", "secret1")

    def test_failed_login_keeps_session(self) -> None:
        token, _ = sessions.login(self.db, "alice", "secret1")
        with self.assertRaises(BadCredentials):
            sessions.login(self.db, "alice", "wrong-password")
        self.assertEqual(sessions.validate_token(self.db, token).id, self.user.id)

    def test_logout_invalidates_token(self) -> None:
        token, user = sessions.login(self.db, "alice", "secret1")
        sessions.logout(self.db, user)
        with self.assertRaises(SessionSuperseded):
            sessions.validate_token(self.db, token)


if __name__ == "__main__":
    unittest.main()
