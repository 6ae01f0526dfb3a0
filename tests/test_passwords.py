"""Tests for Argon2 password hashing."""

from petition_admin.services.passwords import hash_password, needs_rehash, verify_password


def test_hash_and_verify_password():
    password_hash = hash_password("Letmein1!")

    assert password_hash.startswith("$argon2id$")
    assert verify_password("Letmein1!", password_hash)
    assert not verify_password("Letmein2!", password_hash)


def test_hashes_are_salted():
    assert hash_password("Letmein1!") != hash_password("Letmein1!")


def test_verify_rejects_malformed_hash():
    assert not verify_password("Letmein1!", "not-a-hash")


def test_current_hash_does_not_need_rehash():
    assert not needs_rehash(hash_password("Letmein1!"))
