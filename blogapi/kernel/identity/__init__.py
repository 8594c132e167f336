"""
Identity Core - credentials, principals and user accounts.
"""

from blogapi.kernel.identity.password import PasswordHasher, verify_password, hash_password
from blogapi.kernel.identity.jwt import (
    TokenCodec,
    TokenClaims,
    decode_secret_key,
)
from blogapi.kernel.identity.principal import Principal
from blogapi.kernel.identity.identity_service import IdentityService

__all__ = [
    "PasswordHasher",
    "verify_password",
    "hash_password",
    "TokenCodec",
    "TokenClaims",
    "decode_secret_key",
    "Principal",
    "IdentityService",
]
