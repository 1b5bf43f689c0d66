"""Session lifecycle policy.

Decides what happens when a session ends, whether the user signed out or the
credentials could not be refreshed. It clears local state and tells the
application shell through ``SessionEnded`` events; navigation is the shell's
business.
"""

from __future__ import annotations

import json
from enum import StrEnum
from typing import TYPE_CHECKING, Callable

from pydantic import BaseModel, ConfigDict, ValidationError

from .models import Identity
from .telemetry import get_logger

if TYPE_CHECKING:
    from .config import StorageConfig
    from .credentials import CredentialStore
    from .storage import KeyValueStorage


class SignOutReason(StrEnum):
    """Why a session ended."""

    USER_SIGN_OUT = "user_sign_out"
    REFRESH_FAILED = "refresh_failed"
    INVALID_CREDENTIAL = "invalid_credential"


class SessionEnded(BaseModel):
    """Event emitted to listeners after local session state is gone."""

    model_config = ConfigDict(frozen=True)

    reason: SignOutReason
    error: str | None = None


SessionListener = Callable[[SessionEnded], None]


class SessionLifecycle:
    """Owns sign-out cleanup and the cached identity."""

    def __init__(
        self,
        store: CredentialStore,
        storage: KeyValueStorage,
        config: StorageConfig,
    ) -> None:
        """Initialize session lifecycle.

        Args:
            store: Credential store to clear on sign-out.
            storage: Persisted storage holding the cached identity.
            config: Storage key configuration.
        """
        self._store = store
        self._storage = storage
        self._identity_key = config.identity_key
        self._extra_keys = config.clear_on_sign_out
        self._identity: Identity | None = None
        self._listeners: list[SessionListener] = []
        self._logger = get_logger()

    @property
    def identity(self) -> Identity | None:
        """Get the cached identity, if any."""
        return self._identity

    def load(self) -> None:
        """Restore the cached identity from storage, dropping it if corrupted."""
        raw = self._storage.get(self._identity_key)
        if raw is None:
            return
        try:
            self._identity = Identity.model_validate(json.loads(raw))
        except (ValueError, ValidationError) as e:
            self._logger.warning("Cached identity is corrupted, discarding", error=str(e))
            self._identity = None
            self._storage.remove(self._identity_key)

    def remember_identity(self, identity: Identity) -> None:
        """Cache the signed-in identity in memory and storage."""
        self._identity = identity
        self._storage.set(self._identity_key, identity.model_dump_json())

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener for session-ended events.

        Returns:
            Callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def force_sign_out(
        self,
        reason: SignOutReason = SignOutReason.USER_SIGN_OUT,
        *,
        error: BaseException | None = None,
    ) -> None:
        """Clear credentials and cached identity, then notify listeners.

        Args:
            reason: Why the session ended.
            error: Failure that ended the session, if any.
        """
        self._store.clear()
        self._identity = None
        self._storage.remove(self._identity_key)
        for key in self._extra_keys:
            self._storage.remove(key)

        self._logger.info("Session ended", reason=reason.value)

        event = SessionEnded(reason=reason, error=str(error) if error else None)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                self._logger.error(
                    "Session listener failed",
                    reason=reason.value,
                    error=str(e),
                )
