"""Service for encrypting and decrypting stored API key values."""

import base64
import hashlib
from cryptography.fernet import Fernet, InvalidToken
from typing import Optional

from insightstream.config import settings


class CredentialService:
    """Service for secure credential management."""

    def __init__(self, secret_key: Optional[str] = None):
        """Initialize credential service with encryption key."""
        self.cipher = self._get_cipher(secret_key or settings.SECRET_KEY)

    def _get_cipher(self, secret_key: str) -> Fernet:
        """
        Get Fernet cipher for encryption/decryption.

        The 32-byte Fernet key is derived from SECRET_KEY.
        """
        key = hashlib.sha256(secret_key.encode()).digest()
        return Fernet(base64.urlsafe_b64encode(key))

    def encrypt_value(self, value: str) -> str:
        """Encrypt a key value for storage."""
        return self.cipher.encrypt(value.encode()).decode()

    def decrypt_value(self, encrypted_value: str) -> str:
        """
        Decrypt a stored key value.

        Raises:
            ValueError: If decryption fails
        """
        try:
            return self.cipher.decrypt(encrypted_value.encode()).decode()
        except InvalidToken as e:
            raise ValueError("Failed to decrypt API key value") from e

    @staticmethod
    def mask_value(value: str) -> str:
        """Show only the last four characters of a secret."""
        if not value:
            return ""
        if len(value) <= 4:
            return "*" * len(value)
        return "*" * min(len(value) - 4, 12) + value[-4:]
