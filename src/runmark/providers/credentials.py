"""Encrypted storage for provider API keys and base URL overrides."""

import json
import logging
import os
from enum import Enum
from pathlib import Path
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

LOGGER = logging.getLogger(__name__)


class CredentialError(Exception):
    """Stored credentials could not be read or written."""

    pass


class CredentialKind(str, Enum):
    """Kinds of secret kept per provider."""

    API_KEY = "api_key"
    BASE_URL = "base_url"


def redact_secret(value: str) -> str:
    """Mask a secret for display, keeping the first and last two characters."""
    stripped = (value or "").strip()
    if not stripped:
        return ""
    if len(stripped) <= 4:
        return "*" * len(stripped)
    return f"{stripped[:2]}{'*' * (len(stripped) - 4)}{stripped[-2:]}"


class CredentialStore:
    """Per-provider secrets encrypted with a Fernet key kept beside the file.

    Entries are stored as ``{"<provider>:<kind>": "<token>"}`` in a JSON
    file. The key file is created on first write.
    """

    def __init__(self, path: Path, key_path: Optional[Path] = None) -> None:
        """Initialize the store.

        Args:
            path: JSON file holding the encrypted entries
            key_path: Fernet key file (default: ``path`` with ``.key`` suffix)
        """
        self.path = path
        self.key_path = key_path or path.with_suffix(".key")
        self._fernet: Optional[Fernet] = None

    def get(
        self, provider: str, kind: CredentialKind = CredentialKind.API_KEY
    ) -> Optional[str]:
        """Get the decrypted value, or None if nothing is stored.

        Raises:
            CredentialError: If the stored token cannot be decrypted
        """
        token = self._read_entries().get(self._entry_name(provider, kind))
        if token is None:
            return None
        try:
            return self._get_fernet().decrypt(token.encode("ascii")).decode("utf-8")
        except InvalidToken as e:
            raise CredentialError(
                f"Could not decrypt {kind.value} for {provider}"
            ) from e

    def set(
        self,
        provider: str,
        value: str,
        kind: CredentialKind = CredentialKind.API_KEY,
    ) -> None:
        """Encrypt and store a value, replacing any existing one."""
        value = value.strip()
        if not value:
            raise CredentialError(f"Refusing to store an empty {kind.value}")
        entries = self._read_entries()
        token = self._get_fernet().encrypt(value.encode("utf-8"))
        entries[self._entry_name(provider, kind)] = token.decode("ascii")
        self._write_entries(entries)
        LOGGER.debug("Stored %s for %s", kind.value, provider)

    def delete(
        self, provider: str, kind: CredentialKind = CredentialKind.API_KEY
    ) -> bool:
        """Remove a value. Returns True if something was removed."""
        entries = self._read_entries()
        if entries.pop(self._entry_name(provider, kind), None) is None:
            return False
        self._write_entries(entries)
        LOGGER.debug("Deleted %s for %s", kind.value, provider)
        return True

    def has(
        self, provider: str, kind: CredentialKind = CredentialKind.API_KEY
    ) -> bool:
        """Check if a value is stored (without decrypting it)."""
        return self._entry_name(provider, kind) in self._read_entries()

    def stored_providers(
        self, kind: CredentialKind = CredentialKind.API_KEY
    ) -> list[str]:
        """List providers that have a value of the given kind."""
        suffix = f":{kind.value}"
        return sorted(
            name[: -len(suffix)]
            for name in self._read_entries()
            if name.endswith(suffix)
        )

    def clear(self) -> None:
        """Remove every stored value."""
        self._write_entries({})

    @staticmethod
    def _entry_name(provider: str, kind: CredentialKind) -> str:
        return f"{provider}:{kind.value}"

    def _read_entries(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise CredentialError(
                f"Credential file {self.path} is not valid JSON"
            ) from e
        if not isinstance(payload, dict) or not all(
            isinstance(value, str) for value in payload.values()
        ):
            raise CredentialError(f"Credential file {self.path} is malformed")
        return payload

    def _write_entries(self, entries: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(".tmp")
        tmp_path.write_text(json.dumps(entries, indent=2, sort_keys=True), encoding="utf-8")
        if os.name != "nt":
            os.chmod(tmp_path, 0o600)
        tmp_path.replace(self.path)

    def _get_fernet(self) -> Fernet:
        if self._fernet is None:
            self._fernet = Fernet(self._load_or_create_key())
        return self._fernet

    def _load_or_create_key(self) -> bytes:
        path = self.key_path
        if path.exists():
            return path.read_bytes().strip()
        path.parent.mkdir(parents=True, exist_ok=True)
        key = Fernet.generate_key()
        tmp_path = path.with_suffix(".keytmp")
        tmp_path.write_bytes(key)
        if os.name != "nt":
            os.chmod(tmp_path, 0o600)
        tmp_path.replace(path)
        LOGGER.debug("Created credential key at %s", path)
        return key
