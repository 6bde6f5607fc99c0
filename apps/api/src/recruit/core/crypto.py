"""Encryption of application form data at rest."""

import base64
import hashlib
import json
from typing import Any

from cryptography.fernet import Fernet, InvalidToken

from recruit.core.config import settings


class DecryptionError(ValueError):
    """Raised when stored form data cannot be decrypted."""


def _fernet_for_key(key: str) -> Fernet:
    derived = base64.urlsafe_b64encode(hashlib.sha256(key.encode("utf-8")).digest())
    return Fernet(derived)


def encrypt_form_data(form_data: dict[str, Any], *, key: str | None = None) -> str:
    plaintext = json.dumps(form_data, ensure_ascii=False).encode("utf-8")
    return _fernet_for_key(key or settings.encryption_key).encrypt(plaintext).decode("utf-8")


def decrypt_form_data(token: str, *, key: str | None = None) -> dict[str, Any]:
    cipher = _fernet_for_key(key or settings.encryption_key)
    try:
        plaintext = cipher.decrypt(token.encode("utf-8"))
    except InvalidToken as exc:
        raise DecryptionError("Unable to decrypt stored form data") from exc
    return json.loads(plaintext.decode("utf-8"))
