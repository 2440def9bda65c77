"""
Secret encryption: encrypt / decrypt stored credentials and OAuth payloads.

Uses Fernet (AES-128-CBC + HMAC-SHA256) from the ``cryptography`` library.
The key is loaded from ``config.token_encryption_key``
(env var: ``TOKEN_ENCRYPTION_KEY``).

If no key is configured, encryption is **disabled** and values are stored
as plaintext JSON (with a startup warning).  Generate a key with::

    python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())"
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from cryptography.fernet import Fernet, InvalidToken

from config.settings import config

logger = logging.getLogger(__name__)


class SecretCipher:
    """Serialises values to JSON and optionally encrypts them."""

    def __init__(self, key: Optional[str]) -> None:
        self._fernet: Optional[Fernet] = None
        if key:
            self._fernet = Fernet(key.encode() if isinstance(key, str) else key)

    @property
    def enabled(self) -> bool:
        return self._fernet is not None

    def dumps(self, value: Any) -> str:
        raw = json.dumps(value, separators=(",", ":"))
        if self._fernet is None:
            return raw
        return self._fernet.encrypt(raw.encode()).decode()

    def loads(self, stored: str) -> Any:
        """
        Decrypt and parse a stored value.

        Values written before encryption was enabled are not valid Fernet
        tokens and are parsed as plain JSON.
        """
        if self._fernet is not None:
            try:
                stored = self._fernet.decrypt(stored.encode()).decode()
            except InvalidToken:
                pass
        return json.loads(stored)


_default_cipher: Optional[SecretCipher] = None


def default_cipher() -> SecretCipher:
    """Lazy-initialise the process cipher from settings once."""
    global _default_cipher
    if _default_cipher is not None:
        return _default_cipher

    key = config.token_encryption_key
    if not key:
        logger.warning(
            "TOKEN_ENCRYPTION_KEY not set; credentials and OAuth payloads will be stored as plaintext"
        )
        _default_cipher = SecretCipher(None)
        return _default_cipher

    try:
        _default_cipher = SecretCipher(key)
        logger.info("Secret encryption enabled (Fernet/AES-128-CBC)")
    except ValueError as exc:
        logger.error("Failed to initialise Fernet with provided key: %s", exc)
        raise
    return _default_cipher
