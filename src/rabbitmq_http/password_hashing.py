from __future__ import annotations

import base64
import hashlib
import secrets
from typing import Optional, Union

from rabbitmq_http.commons import HashingAlgorithm

SALT_LENGTH = 4

_digests = {
    HashingAlgorithm.rabbit_password_hashing_sha256: hashlib.sha256,
    HashingAlgorithm.rabbit_password_hashing_sha512: hashlib.sha512,
}


def generate_salt() -> bytes:
    return secrets.token_bytes(SALT_LENGTH)


def salted_password_hash(
    salt_bytes: bytes,
    passwd: str,
    algorithm: HashingAlgorithm = HashingAlgorithm.rabbit_password_hashing_sha256,
) -> bytes:
    digest = _digests[HashingAlgorithm(algorithm)]
    return salt_bytes + digest(salt_bytes + passwd.encode("utf-8")).digest()  # lgtm


def hash_password(
    passwd: str,
    salt: Optional[Union[str, bytes]] = None,
    algorithm: HashingAlgorithm = HashingAlgorithm.rabbit_password_hashing_sha256,
) -> str:
    """
    Compute a value for User.password_hash: base64(salt + digest(salt + password)).

    ``salt`` may be raw salt bytes or an existing base64 password hash, whose
    leading four bytes are reused so that the result can be compared with it.
    """
    if isinstance(salt, bytes):
        salt_bytes = salt[:SALT_LENGTH]
    elif salt:
        # extract salt from an existing password hash
        salt_bytes = base64.b64decode(salt)[:SALT_LENGTH]
    else:
        salt_bytes = generate_salt()
    salted_hash = salted_password_hash(salt_bytes, passwd, algorithm)
    return base64.b64encode(salted_hash).decode()
