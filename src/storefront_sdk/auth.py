"""Authentication calls made by the storefront application.

Sign-in, registration, sign-out, current-user lookup and the password reset
flow. Credentials returned by the API go straight into the credential store;
sign-out always ends in ``SessionLifecycle.force_sign_out``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError

from . import tokens
from .errors import (
    ErrorCode,
    StorefrontError,
    TokenRefreshError,
    is_auth_error,
)
from .models import AuthData, Identity, unwrap_envelope
from .session import SignOutReason
from .telemetry import get_logger, traced_async

if TYPE_CHECKING:
    from .core.gateway import RequestGateway
    from .core.refresh import RefreshCoordinator
    from .credentials import CredentialStore
    from .session import SessionLifecycle


class AuthService:
    """Authentication flows on top of the request gateway."""

    def __init__(
        self,
        gateway: RequestGateway,
        store: CredentialStore,
        session: SessionLifecycle,
        coordinator: RefreshCoordinator,
    ) -> None:
        self._gateway = gateway
        self._store = store
        self._session = session
        self._coordinator = coordinator
        self._logger = get_logger()

    @traced_async("auth.login")
    async def login(self, email: str, password: str) -> AuthData:
        """Sign in and store the issued credentials.

        Raises:
            ApiError: If the API rejects the credentials.
            StorefrontError: If the response carries no usable auth data.
        """
        body = await self._gateway.post(
            "/auth/login", json={"email": email, "password": password}
        )
        auth = self._accept_auth_data(body)
        self._logger.info("Signed in", user_id=auth.user.id)
        return auth

    @traced_async("auth.register")
    async def register(self, email: str, password: str, name: str) -> AuthData:
        """Create an account and sign in with the issued credentials."""
        body = await self._gateway.post(
            "/auth/register",
            json={"email": email, "password": password, "name": name},
        )
        auth = self._accept_auth_data(body)
        self._logger.info("Registered", user_id=auth.user.id)
        return auth

    @traced_async("auth.logout")
    async def logout(self) -> None:
        """Sign out: tell the server if possible, then always clean up locally."""
        had_credential = self._store.has_credential()
        try:
            if had_credential:
                await self._gateway.post("/auth/logout")
        except StorefrontError as e:
            self._logger.warning("Server-side logout failed", error=e.message)
        finally:
            if had_credential and self._store.pair.is_empty:
                # A failed refresh during the call already ended the session
                self._logger.debug("Session already ended during logout")
            else:
                self._session.force_sign_out(SignOutReason.USER_SIGN_OUT)

    async def refresh(self) -> str:
        """Refresh credentials explicitly through the shared coordinator.

        Returns:
            The new access token.

        Raises:
            TokenRefreshError: If there is no refresh token or the exchange fails.
        """
        return await self._coordinator.refresh()

    @traced_async("auth.current_user")
    async def current_user(self) -> Identity:
        """Fetch the signed-in user, falling back to the token's claims.

        Raises:
            StorefrontError: If the API call fails and no unexpired token
                identity is available.
        """
        try:
            body = await self._gateway.get("/auth/me")
        except StorefrontError as e:
            self._logger.warning("Fetching current user failed", error=e.message)
            access = self._store.peek_access()
            if access is not None and not tokens.is_expired(access):
                fallback = tokens.identity_from_token(access)
                if fallback is not None:
                    return fallback
            raise

        try:
            identity = Identity.model_validate(unwrap_envelope(body))
        except PydanticValidationError as e:
            raise StorefrontError(
                "Current user response is malformed",
                ErrorCode.VALIDATION_ERROR,
            ) from e

        self._session.remember_identity(identity)
        return identity

    async def restore_session(self) -> Identity | None:
        """Re-establish the signed-in user at application start.

        An authentication failure ends the session; any other failure falls
        back to the cached identity.
        """
        if not self._store.is_authenticated():
            return None

        try:
            return await self.current_user()
        except StorefrontError as e:
            if is_auth_error(e):
                self._logger.info("Stored credentials rejected, signing out")
                if not isinstance(e, TokenRefreshError):
                    self._session.force_sign_out(SignOutReason.INVALID_CREDENTIAL, error=e)
                return None
            self._logger.warning("Using cached identity", error=e.message)
            return self._session.identity

    async def forgot_password(self, email: str) -> str:
        """Start a password reset.

        Returns:
            The reset id needed by the following steps.
        """
        body = await self._gateway.post("/auth/forgot-password", json={"email": email})
        data = unwrap_envelope(body)
        reset_id = data.get("resetId") if isinstance(data, dict) else None
        if not reset_id:
            raise StorefrontError(
                "Password reset response has no resetId",
                ErrorCode.VALIDATION_ERROR,
            )
        return str(reset_id)

    async def verify_reset_code(self, reset_id: str, reset_code: str) -> bool:
        await self._gateway.post(
            "/auth/verify-reset-code",
            json={"resetId": reset_id, "resetCode": reset_code},
        )
        return True

    async def reset_password(
        self,
        reset_id: str,
        reset_code: str,
        new_password: str,
    ) -> bool:
        await self._gateway.post(
            "/auth/reset-password",
            json={
                "resetId": reset_id,
                "resetCode": reset_code,
                "newPassword": new_password,
            },
        )
        return True

    def is_authenticated(self) -> bool:
        return self._store.is_authenticated()

    def is_admin(self) -> bool:
        identity = self._session.identity
        return identity is not None and identity.is_admin

    def _accept_auth_data(self, body: Any) -> AuthData:
        try:
            auth = AuthData.model_validate(unwrap_envelope(body))
        except PydanticValidationError as e:
            raise StorefrontError(
                "Authentication response is missing user or tokens",
                ErrorCode.VALIDATION_ERROR,
                details={"errors": e.errors(include_url=False)},
            ) from e

        self._store.set_credentials(auth.access_token, auth.refresh_token)
        self._session.remember_identity(auth.user)
        return auth

