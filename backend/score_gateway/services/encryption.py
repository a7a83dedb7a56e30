"""Field-level encryption using Fernet (AES-128-CBC) with key versioning.

The ENCRYPTION_KEY lives only in memory (env var). Stored virtual provider
API keys are useless without it.
"""

from cryptography.fernet import Fernet

from score_gateway.config import settings


def _build_registry() -> tuple[int, dict[int, Fernet]]:
    if not settings.ENCRYPTION_KEY:
        raise ValueError("ENCRYPTION_KEY is not configured")
    # For key rotation: set ENCRYPTION_KEY to the new key, ENCRYPTION_KEY_OLD to the
    # previous one. Secrets are re-encrypted lazily on read.
    if settings.ENCRYPTION_KEY_OLD:
        return 2, {
            1: Fernet(settings.ENCRYPTION_KEY_OLD.encode()),
            2: Fernet(settings.ENCRYPTION_KEY.encode()),
        }
    return 1, {1: Fernet(settings.ENCRYPTION_KEY.encode())}


def current_key_version() -> int:
    return _build_registry()[0]


def encrypt(plaintext: str, key_version: int | None = None) -> str:
    """Encrypt a string and return base64 ciphertext."""
    current, registry = _build_registry()
    f = registry.get(key_version or current)
    if not f:
        raise ValueError(f"Unknown key version: {key_version}")
    return f.encrypt(plaintext.encode()).decode()


def decrypt(ciphertext: str, key_version: int | None = None) -> str:
    """Decrypt base64 ciphertext and return plaintext."""
    current, registry = _build_registry()
    f = registry.get(key_version or current)
    if not f:
        raise ValueError(f"Unknown key version: {key_version}")
    return f.decrypt(ciphertext.encode()).decode()


def needs_reencryption(stored_version: int) -> bool:
    """Check if a secret needs re-encryption with the current key."""
    return stored_version != current_key_version()


def reencrypt(ciphertext: str, old_version: int) -> tuple[str, int]:
    """Re-encrypt a secret from an old key to the current key.

    Returns (new_ciphertext, new_version).
    """
    plaintext = decrypt(ciphertext, key_version=old_version)
    version = current_key_version()
    return encrypt(plaintext, key_version=version), version
