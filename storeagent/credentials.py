"""Per-provider API key storage.

Keys are XOR-ed against a process-wide secret and base64 encoded before
they are written to the config store. This only keeps the literal key out
of the file; anyone who can read both the file and the secret can recover
it. Swap in authenticated encryption before relying on it for
confidentiality.

Unless ``STOREAGENT_SECRET`` is set, the generated secret is saved under
``secret`` in the same config file as the obfuscated keys, so reading that
one file is enough to recover every key. Set the environment variable to
keep the secret out of the file.
"""

from __future__ import annotations

import base64
import binascii
import logging
import os
import secrets
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from storeagent.config import ConfigStore

log = logging.getLogger(__name__)

SECRET_ENV = "STOREAGENT_SECRET"
SECRET_KEY = "secret"


def credential_key(provider_id: str) -> str:
    return f"{provider_id}_api_key"


def obfuscate(value: str, secret: str) -> str:
    if not value:
        return ""
    data = value.encode("utf-8")
    key = secret.encode("utf-8")
    mixed = bytes(b ^ key[i % len(key)] for i, b in enumerate(data))
    return base64.b64encode(mixed).decode("ascii")


def reveal(stored: str, secret: str) -> str:
    if not stored:
        return ""
    try:
        mixed = base64.b64decode(stored, validate=True)
    except (binascii.Error, ValueError):
        log.warning("Stored credential is not valid base64; ignoring it")
        return ""
    key = secret.encode("utf-8")
    data = bytes(b ^ key[i % len(key)] for i, b in enumerate(mixed))
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        log.warning("Stored credential does not decode with the current secret")
        return ""


class CredentialStore:
    """Saves and reads obfuscated API keys, one slot per provider."""

    def __init__(self, store: ConfigStore, secret: str | None = None):
        self.store = store
        self._secret = secret

    @property
    def secret(self) -> str:
        if self._secret:
            return self._secret
        secret = os.environ.get(SECRET_ENV) or self.store.get(SECRET_KEY)
        if not secret:
            secret = secrets.token_hex(32)
            self.store.set(SECRET_KEY, secret)
        self._secret = secret
        return secret

    def save(self, provider_id: str, api_key: str) -> None:
        self.store.set(credential_key(provider_id), obfuscate(api_key, self.secret))

    def get(self, provider_id: str) -> str:
        return reveal(self.store.get(credential_key(provider_id), "") or "", self.secret)

    def has(self, provider_id: str) -> bool:
        return bool(self.store.get(credential_key(provider_id)))
