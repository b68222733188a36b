"""Tests for password hashing."""

from wemanage.services.passwords import get_password_hash, verify_password


def test_hash_is_not_plaintext():
    hashed = get_password_hash("s3cret-pass")
    assert hashed != "s3cret-pass"
    assert hashed.startswith("$2")


def test_same_password_hashes_differently():
    assert get_password_hash("s3cret-pass") != get_password_hash("s3cret-pass")


def test_verify_password():
    hashed = get_password_hash("s3cret-pass")
    assert verify_password("s3cret-pass", hashed) is True
    assert verify_password("wrong-pass", hashed) is False


def test_verify_against_missing_hash():
    assert verify_password("anything", None) is False
    assert verify_password("anything", "") is False


def test_verify_against_garbage_hash():
    assert verify_password("anything", "not-a-bcrypt-hash") is False
