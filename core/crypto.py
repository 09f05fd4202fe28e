"""
Cryptographic helpers for encrypting sensitive MCP values.

Each value is sealed independently with AES-256-GCM under a key derived
from the password by PBKDF2-HMAC-SHA256 with a per-value random salt. The
stored form is base64(salt || nonce || ciphertext+tag).
"""

import base64
import binascii
import hashlib
import logging
import os
import secrets
import string

from cryptography.exceptions import InvalidTag, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from core.errors import DecryptionError, EncryptionError
from utils.constants import (
    ERROR_MESSAGES,
    KDF_ITERATIONS,
    KEY_LENGTH,
    NONCE_LENGTH,
    SALT_LENGTH,
)

logger = logging.getLogger(__name__)

_PASSWORD_ALPHABET = string.ascii_letters + string.digits + "!@#$%^&*"


def derive_key(password: str, salt: bytes) -> bytes:
    """Derive a 256-bit key from a password and salt."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=KDF_ITERATIONS,
    )
    return kdf.derive(password.encode("utf-8"))


def encrypt_data(data: str, password: str) -> str:
    """
    Encrypt a string value.

    Args:
        data: Plaintext value
        password: Encryption password

    Returns:
        Base64 token holding salt, nonce and ciphertext

    Raises:
        EncryptionError: If encryption fails
    """
    try:
        salt = os.urandom(SALT_LENGTH)
        nonce = os.urandom(NONCE_LENGTH)
        key = derive_key(password, salt)
        ciphertext = AESGCM(key).encrypt(nonce, data.encode("utf-8"), None)
        return base64.b64encode(salt + nonce + ciphertext).decode("ascii")
    except (TypeError, ValueError, UnsupportedAlgorithm) as e:
        logger.error(f"Encryption failed: {e}")
        raise EncryptionError(ERROR_MESSAGES["ENCRYPT_FAILED"]) from e


def decrypt_data(encrypted_data: str, password: str) -> str:
    """
    Decrypt a token produced by encrypt_data.

    Raises:
        DecryptionError: On malformed input, wrong password or tampering
    """
    try:
        combined = base64.b64decode(encrypted_data.encode("ascii"), validate=True)
        # GCM tag alone is 16 bytes
        if len(combined) < SALT_LENGTH + NONCE_LENGTH + 16:
            raise ValueError("encrypted payload too short")

        salt = combined[:SALT_LENGTH]
        nonce = combined[SALT_LENGTH:SALT_LENGTH + NONCE_LENGTH]
        ciphertext = combined[SALT_LENGTH + NONCE_LENGTH:]

        key = derive_key(password, salt)
        return AESGCM(key).decrypt(nonce, ciphertext, None).decode("utf-8")
    except (InvalidTag, binascii.Error, ValueError, UnicodeError, UnsupportedAlgorithm) as e:
        raise DecryptionError(ERROR_MESSAGES["DECRYPT_FAILED"]) from e


def safe_decrypt(encrypted_data: str, password: str) -> str:
    """Decrypt a value, falling back to the stored value when decryption fails."""
    try:
        return decrypt_data(encrypted_data, password)
    except DecryptionError as e:
        logger.warning(f"{e}; using stored value as-is")
        return encrypted_data


def generate_secure_password(length: int = 32) -> str:
    """Generate a random password suitable for encryption."""
    return "".join(secrets.choice(_PASSWORD_ALPHABET) for _ in range(length))


def hash_string(value: str) -> str:
    """Return the SHA-256 hex digest of a string."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def is_encryption_supported() -> bool:
    """Check whether the installed crypto backend provides AES-GCM."""
    try:
        AESGCM(AESGCM.generate_key(bit_length=KEY_LENGTH * 8))
        return True
    except UnsupportedAlgorithm:
        logger.warning("AES-GCM is not supported by the crypto backend; encryption disabled")
        return False
