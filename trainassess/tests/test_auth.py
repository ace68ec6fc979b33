"""
Tests for the access control gate.

This module covers:
1. Access token creation and verification
2. Password hashing
3. The capability table
4. Authorization header parsing
"""

import datetime
import unittest

import jwt as pyjwt
import pytest

from trainassess.common.auth import (
    PERMISSIONS,
    ExpiredTokenError,
    Identity,
    InsufficientPermissionsError,
    InvalidTokenError,
    JWTConfig,
    MissingTokenError,
    Operation,
    UserRole,
    authenticate,
    authorize,
    create_access_token,
    get_jwt_config,
    get_token_identity,
    hash_password,
    is_allowed,
    set_jwt_config,
    verify_password
)
from trainassess.common.exceptions import AuthenticationError, AuthorizationError

TRAINEE = Identity(id="u-1", email="trainee@example.com", role=UserRole.TRAINEE, name="Tina Trainee")
ADMIN = Identity(id="u-2", email="admin@example.com", role=UserRole.ADMIN, name="")
SUPERADMIN = Identity(id="u-3", email="root@example.com", role=UserRole.SUPERADMIN, name="Root")


class TestTokens(unittest.TestCase):
    """Test creating and decoding access tokens."""

    def setUp(self):
        self.previous = get_jwt_config()
        set_jwt_config(JWTConfig(secret_key="test-secret", token_issuer="test-issuer"))

    def tearDown(self):
        set_jwt_config(self.previous)

    def test_round_trip_identity(self):
        token = create_access_token(TRAINEE)
        self.assertEqual(get_token_identity(token), TRAINEE)

    def test_claims(self):
        payload = pyjwt.decode(
            create_access_token(ADMIN), "test-secret", algorithms=["HS256"], issuer="test-issuer"
        )
        self.assertEqual(payload["sub"], "u-2")
        self.assertEqual(payload["role"], "admin")
        self.assertEqual(payload["type"], "access")
        self.assertEqual(payload["exp"] - payload["iat"], 24 * 60 * 60)

    def test_expired_token(self):
        token = create_access_token(TRAINEE, expires_in=-1)
        with self.assertRaises(ExpiredTokenError):
            get_token_identity(token)

    def test_wrong_secret(self):
        token = create_access_token(TRAINEE)
        set_jwt_config(JWTConfig(secret_key="other-secret", token_issuer="test-issuer"))
        with self.assertRaises(InvalidTokenError):
            get_token_identity(token)

    def test_wrong_issuer(self):
        token = create_access_token(TRAINEE)
        set_jwt_config(JWTConfig(secret_key="test-secret", token_issuer="someone-else"))
        with self.assertRaises(InvalidTokenError):
            get_token_identity(token)

    def test_unknown_role(self):
        now = datetime.datetime.now(datetime.timezone.utc)
        token = pyjwt.encode(
            {
                "sub": "u-9",
                "email": "x@example.com",
                "role": "owner",
                "iat": now,
                "exp": now + datetime.timedelta(minutes=5),
                "iss": "test-issuer",
                "type": "access"
            },
            "test-secret",
            algorithm="HS256"
        )
        with self.assertRaises(InvalidTokenError):
            get_token_identity(token)

    def test_garbage(self):
        with self.assertRaises(InvalidTokenError):
            get_token_identity("not-a-token")


class TestAuthenticate(unittest.TestCase):
    """Test authenticating from an Authorization header."""

    def setUp(self):
        self.previous = get_jwt_config()
        set_jwt_config(JWTConfig(secret_key="test-secret"))

    def tearDown(self):
        set_jwt_config(self.previous)

    def test_bearer_header(self):
        token = create_access_token(ADMIN)
        self.assertEqual(authenticate(f"Bearer {token}"), ADMIN)

    def test_missing_header(self):
        with self.assertRaises(MissingTokenError):
            authenticate(None)

    def test_wrong_scheme(self):
        token = create_access_token(ADMIN)
        with self.assertRaises(InvalidTokenError):
            authenticate(f"Basic {token}")

    def test_errors_are_authentication_errors(self):
        with self.assertRaises(AuthenticationError) as ctx:
            authenticate("")
        self.assertEqual(ctx.exception.status_code, 401)


class TestPasswords(unittest.TestCase):
    """Test password hashing."""

    def test_verify(self):
        stored = hash_password("secret1")
        self.assertTrue(verify_password("secret1", stored))
        self.assertFalse(verify_password("secret2", stored))

    def test_salted(self):
        self.assertNotEqual(hash_password("secret1"), hash_password("secret1"))
        self.assertEqual(hash_password("secret1", salt="abc"), hash_password("secret1", salt="abc"))

    def test_malformed_stored_value(self):
        self.assertFalse(verify_password("secret1", ""))
        self.assertFalse(verify_password("secret1", "no-separator"))


class TestCapabilityTable(unittest.TestCase):
    """Test the operation to roles table."""

    def test_every_operation_declared(self):
        self.assertEqual(set(PERMISSIONS), set(Operation))

    def test_only_trainees_submit(self):
        self.assertTrue(is_allowed(UserRole.TRAINEE, Operation.SUBMIT_ATTEMPT))
        self.assertFalse(is_allowed(UserRole.ADMIN, Operation.SUBMIT_ATTEMPT))
        self.assertFalse(is_allowed(UserRole.SUPERADMIN, Operation.SUBMIT_ATTEMPT))

    def test_only_staff_evaluate(self):
        self.assertFalse(is_allowed(UserRole.TRAINEE, Operation.EVALUATE_ATTEMPT))
        self.assertTrue(is_allowed(UserRole.ADMIN, Operation.EVALUATE_ATTEMPT))
        self.assertTrue(is_allowed(UserRole.SUPERADMIN, Operation.EVALUATE_ATTEMPT))

    def test_only_superadmin_manages_users(self):
        self.assertFalse(is_allowed(UserRole.ADMIN, Operation.MANAGE_USERS))
        self.assertTrue(is_allowed(UserRole.SUPERADMIN, Operation.MANAGE_USERS))


@pytest.mark.parametrize("operation", [
    Operation.EVALUATE_ATTEMPT,
    Operation.LIST_ATTEMPTS,
    Operation.DELETE_ATTEMPT,
    Operation.MANAGE_QUESTION_SETS,
    Operation.LIST_TRAINEES,
    Operation.MANAGE_USERS,
])
def test_trainee_rejected_with_authorization_error(operation):
    with pytest.raises(InsufficientPermissionsError) as exc_info:
        authorize(TRAINEE, operation)
    assert isinstance(exc_info.value, AuthorizationError)
    assert exc_info.value.status_code == 403
    assert exc_info.value.operation == operation.value


def test_display_name_falls_back_to_email():
    assert TRAINEE.display_name == "Tina Trainee"
    assert ADMIN.display_name == "admin@example.com"
