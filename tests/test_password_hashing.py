import base64
import hashlib

from rabbitmq_http.commons import HashingAlgorithm
from rabbitmq_http.password_hashing import hash_password, salted_password_hash


def test_known_hash():
    salt = bytes.fromhex("908d c60a".replace(" ", ""))
    expected = base64.b64encode(
        salt + hashlib.sha256(salt + b"test12").digest()
    ).decode()
    assert hash_password("test12", salt) == expected


def test_salt_is_random_and_prefixed():
    first, second = hash_password("secret"), hash_password("secret")
    assert first != second
    assert len(base64.b64decode(first)) == 4 + 32


def test_salt_can_be_taken_from_an_existing_hash():
    stored = hash_password("secret")
    assert hash_password("secret", stored) == stored
    assert hash_password("guess", stored) != stored


def test_sha512():
    salted = salted_password_hash(
        b"salt", "secret", HashingAlgorithm.rabbit_password_hashing_sha512
    )
    assert salted[:4] == b"salt"
    assert len(salted) == 4 + 64
