"""
Encryption utilities

Symmetric encryption (Fernet) for personal data stored with a
reservation, such as the tenant's ID-proof number.
"""

import base64
import hashlib
from functools import lru_cache

from cryptography.fernet import Fernet, InvalidToken
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


@lru_cache(maxsize=4)
def _fernet_for(key: str) -> Fernet:
    # Arbitrary passphrases are stretched to the 32 bytes Fernet expects
    derived = base64.urlsafe_b64encode(hashlib.sha256(key.encode()).digest())
    return Fernet(derived)


def get_fernet() -> Fernet:
    key = getattr(settings, 'ENCRYPTION_KEY', None)
    if not key:
        raise ImproperlyConfigured(
            "ENCRYPTION_KEY is not configured. "
            "Generate one with: python -c 'from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())'"
        )
    return _fernet_for(key)


def encrypt_string(plaintext: str) -> str:
    """Encrypt a string, returning the URL-safe token"""
    if not plaintext:
        return ''
    return get_fernet().encrypt(plaintext.encode()).decode()


def decrypt_string(token: str) -> str:
    """
    Decrypt a token produced by encrypt_string

    Raises cryptography.fernet.InvalidToken when the key changed or the
    value was never encrypted.
    """
    if not token:
        return ''
    return get_fernet().decrypt(token.encode()).decode()


__all__ = ['InvalidToken', 'decrypt_string', 'encrypt_string', 'get_fernet']
