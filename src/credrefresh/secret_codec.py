"""
Symmetric encryption of stored refresh secrets and access tokens.

The key material is derived from the user's passcode by the caller and
passed in as a Fernet key (32 url-safe base64-encoded bytes). This module
performs no key derivation. Plaintext, ciphertext and key material are
never logged.
"""

import logging
from typing import Union

from cryptography.fernet import Fernet, InvalidToken

from .exceptions import DecryptionError, EncryptionError

logger = logging.getLogger(__name__)

KeyMaterial = Union[str, bytes]


class SecretCodec:
    """
    Encrypt/decrypt secrets using Fernet (AES-128-CBC with HMAC-SHA256).

    Ciphertext is returned as an ASCII string so it can be stored in the
    account metadata store next to plain string fields.
    """

    def encrypt(self, plaintext: str, key: KeyMaterial) -> str:
        """
        Encrypt a secret for storage.

        Args:
            plaintext: Secret to encrypt (refresh secret or access token)
            key: Passcode-derived Fernet key

        Returns:
            Ciphertext string

        Raises:
            EncryptionError: If the key material is unusable
        """
        try:
            fernet = Fernet(key)
        except (ValueError, TypeError) as e:
            logger.error("Encryption key material is not a valid Fernet key")
            raise EncryptionError("Encryption key material is not a valid key") from e

        return fernet.encrypt(plaintext.encode("utf-8")).decode("ascii")

    def decrypt(self, ciphertext: str, key: KeyMaterial) -> str:
        """
        Decrypt a stored secret.

        Args:
            ciphertext: Value previously returned by encrypt()
            key: Passcode-derived Fernet key

        Returns:
            Decrypted plaintext (never log it)

        Raises:
            DecryptionError: If the ciphertext is malformed, was produced with
                a different key, or the key material is unusable
        """
        if not ciphertext:
            raise DecryptionError("Cannot decrypt empty ciphertext")

        try:
            fernet = Fernet(key)
        except (ValueError, TypeError) as e:
            raise DecryptionError("Decryption key material is not a valid key") from e

        try:
            return fernet.decrypt(ciphertext).decode("utf-8")
        except InvalidToken as e:
            raise DecryptionError(
                "Ciphertext is malformed or was encrypted with a different key"
            ) from e
        except (ValueError, TypeError) as e:
            # Non-ASCII ciphertext or non-UTF-8 plaintext
            raise DecryptionError(f"Ciphertext could not be decoded: {type(e).__name__}") from e
