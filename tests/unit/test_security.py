"""Unit tests for security functions."""
import jwt
import pytest
from fastapi import HTTPException
from unittest.mock import Mock, patch

from reelvote.core import config
from reelvote.core.constants import TOKEN_CODE_ALPHABET, TOKEN_CODE_LENGTH
from reelvote.core.security import (
    create_access_token,
    generate_token_code,
    get_password_hash,
    verify_admin_password,
    verify_admin_token,
    verify_password,
)


def _request_with_cookie(token=None):
    request = Mock()
    request.cookies = {"admin_token": token} if token else {}
    return request


@pytest.mark.unit
class TestTokenCodes:

    def test_code_length_and_alphabet(self):
        code = generate_token_code()
        assert len(code) == TOKEN_CODE_LENGTH
        assert set(code) <= set(TOKEN_CODE_ALPHABET)

    def test_codes_are_not_ambiguous(self):
        """Codes are read aloud at the door; 0/O and 1/I never appear."""
        codes = "".join(generate_token_code() for _ in range(200))
        assert not set(codes) & set("01OI")

    def test_codes_vary(self):
        assert len({generate_token_code() for _ in range(500)}) > 490


@pytest.mark.unit
class TestPasswords:

    def test_hash_and_verify(self):
        hashed = get_password_hash("s3cret")
        assert hashed.startswith("$argon2")
        assert verify_password("s3cret", hashed)
        assert not verify_password("wrong", hashed)

    def test_admin_password_plaintext(self):
        with patch.object(config.settings, "ADMIN_PASSWORD", "letmein"):
            assert verify_admin_password("letmein")
            assert not verify_admin_password("nope")

    def test_admin_password_hashed(self):
        with patch.object(config.settings, "ADMIN_PASSWORD", get_password_hash("letmein")):
            assert verify_admin_password("letmein")
            assert not verify_admin_password("nope")


@pytest.mark.unit
class TestAdminToken:

    def test_valid_cookie(self):
        payload = verify_admin_token(_request_with_cookie(create_access_token({"is_admin": True})))
        assert payload["is_admin"] is True

    def test_missing_cookie(self):
        with pytest.raises(HTTPException) as exc:
            verify_admin_token(_request_with_cookie())
        assert exc.value.status_code == 401

    def test_non_admin_token(self):
        with pytest.raises(HTTPException) as exc:
            verify_admin_token(_request_with_cookie(create_access_token({"sub": "someone"})))
        assert exc.value.status_code == 403

    def test_tampered_token(self):
        forged = jwt.encode({"is_admin": True}, "not-the-key", algorithm="HS256")
        with pytest.raises(HTTPException) as exc:
            verify_admin_token(_request_with_cookie(forged))
        assert exc.value.status_code == 401
