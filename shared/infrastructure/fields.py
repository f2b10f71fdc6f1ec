"""
Custom Django model fields for sensitive data.

EncryptedCharField transparently encrypts values on save and decrypts
them on load. Used for ID-proof numbers in the reservation customer
snapshot.
"""

import logging

from django.db import models

from .encryption import InvalidToken, decrypt_string, encrypt_string

logger = logging.getLogger(__name__)


class EncryptedCharField(models.TextField):
    """Text column holding a Fernet token; exposes plaintext to Python."""

    description = "Encrypted text field"

    def from_db_value(self, value, expression, connection):
        if not value:
            return value
        try:
            return decrypt_string(value)
        except InvalidToken:
            logger.warning(f"Could not decrypt value of {self.model.__name__}.{self.name}")
            return ''

    def get_prep_value(self, value):
        value = super().get_prep_value(value)
        if value is None or value == '':
            return ''
        return encrypt_string(str(value))

    def to_python(self, value):
        if value is None:
            return value
        return str(value)
