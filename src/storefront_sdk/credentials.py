"""Credential store: the single owner of the access/refresh pair."""

from __future__ import annotations

from typing import TYPE_CHECKING

from . import tokens
from .models import CredentialPair
from .telemetry import get_logger

if TYPE_CHECKING:
    from .config import StorageConfig
    from .storage import KeyValueStorage


class CredentialStore:
    """Holds the current credential pair in memory and in persisted storage.

    The pair is an immutable ``CredentialPair`` swapped wholesale on every
    change, so readers never see one credential updated and the other stale.
    Only this class writes the credential keys in storage.
    """

    def __init__(self, storage: KeyValueStorage, config: StorageConfig) -> None:
        """Initialize credential store.

        Args:
            storage: Persisted key-value storage.
            config: Storage key configuration.
        """
        self._storage = storage
        self._access_key = config.access_token_key
        self._refresh_key = config.refresh_token_key
        self._pair = CredentialPair()
        self._logger = get_logger()

    @property
    def pair(self) -> CredentialPair:
        """Get the current credential pair."""
        return self._pair

    def load(self) -> None:
        """Read persisted credentials into memory.

        Missing keys mean a signed-out state. A stored access credential that
        cannot be decoded is treated as corrupted and both keys are dropped.
        """
        access = self._storage.get(self._access_key)
        refresh = self._storage.get(self._refresh_key)

        if access is not None and tokens.decode(access) is None:
            self._logger.warning("Stored access token is corrupted, clearing credentials")
            self.clear()
            return

        self._pair = CredentialPair(access_token=access, refresh_token=refresh)
        self._logger.debug(
            "Credentials loaded",
            has_access=access is not None,
            has_refresh=refresh is not None,
        )

    def save(self, access: str | None = None, refresh: str | None = None) -> None:
        """Overwrite whichever credentials are provided.

        Args:
            access: New access token, or None to keep the current one.
            refresh: New refresh token, or None to keep the current one.
        """
        if access is None and refresh is None:
            return

        self._pair = CredentialPair(
            access_token=access if access is not None else self._pair.access_token,
            refresh_token=refresh if refresh is not None else self._pair.refresh_token,
        )
        if access is not None:
            self._storage.set(self._access_key, access)
        if refresh is not None:
            self._storage.set(self._refresh_key, refresh)

    def replace(self, access: str, refresh: str) -> None:
        """Replace both credentials in a single step."""
        self._pair = CredentialPair(access_token=access, refresh_token=refresh)
        self._storage.set(self._access_key, access)
        self._storage.set(self._refresh_key, refresh)

    def set_credentials(self, access: str, refresh: str) -> None:
        """Store the pair issued at sign-in or registration."""
        self.replace(access, refresh)

    def clear(self) -> None:
        """Remove both credentials from memory and storage."""
        self._pair = CredentialPair()
        self._storage.remove(self._access_key)
        self._storage.remove(self._refresh_key)

    def peek_access(self) -> str | None:
        return self._pair.access_token

    def peek_refresh(self) -> str | None:
        return self._pair.refresh_token

    def has_credential(self) -> bool:
        """True if an access token is present (it may still be expired)."""
        return self._pair.access_token is not None

    def is_authenticated(self) -> bool:
        return self.has_credential()
