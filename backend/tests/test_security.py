from datetime import timedelta

import pytest
from jose import JWTError

from lectro.core.security import create_access_token, decode_token, get_password_hash, verify_password


def test_password_hash_round_trip():
    hashed = get_password_hash("correct horse battery")
    assert hashed != "correct horse battery"
    assert verify_password("correct horse battery", hashed)
    assert not verify_password("wrong horse battery", hashed)


def test_passwords_longer_than_bcrypt_limit_are_truncated():
    base = "x" * 72
    hashed = get_password_hash(base + "tail-one")
    assert verify_password(base + "tail-two", hashed)


def test_access_token_carries_subject_and_role():
    token = create_access_token("user-1", role="hod")
    payload = decode_token(token)
    assert payload["sub"] == "user-1"
    assert payload["role"] == "hod"
    assert payload["type"] == "access"


def test_expired_token_is_rejected():
    token = create_access_token("user-1", expires_delta=timedelta(seconds=-5))
    with pytest.raises(JWTError):
        decode_token(token)
