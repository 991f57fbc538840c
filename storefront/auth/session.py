"""
Session/Auth State

Tracks the authenticated identity. Cart state exists only while the
session is authenticated, so the cart manager subscribes here.

States:
- anonymous: no identity
- loading: token present, profile not resolved yet
- authenticated: identity resolved
"""
import inspect
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from storefront.errors import (
    ERROR_INVALID_EMAIL,
    ERROR_PASSWORD_MISMATCH,
    ERROR_PASSWORD_TOO_SHORT,
    NOTICE_PASSWORD_RESET,
    NOTICE_RESET_LINK_SENT,
    ApiError,
    StorefrontError,
    ValidationError,
)
from storefront.http.client import ApiClient, path_segment
from storefront.logging import get_logger, sanitize_id_for_logging, sanitize_string_for_logging
from storefront.models import AuthResponse, User

logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 6


class SessionStatus(str, Enum):
    ANONYMOUS = "anonymous"
    LOADING = "loading"
    AUTHENTICATED = "authenticated"


SessionListener = Callable[[SessionStatus], Any]


class SessionState:
    """
    Owner of the current identity.

    Token persistence goes through the injected ``ApiClient``; a 401 seen
    by the client anywhere drops the session to anonymous.
    """

    def __init__(self, client: ApiClient):
        self.client = client
        self.user: Optional[User] = None
        self.status = SessionStatus.ANONYMOUS
        # Bumped on every transition so in-flight work can detect staleness
        self.epoch = 0
        self._listeners: List[SessionListener] = []
        client.on_unauthorized(self._handle_unauthorized)

    # ==================== STATE ====================

    @property
    def is_authenticated(self) -> bool:
        return self.status == SessionStatus.AUTHENTICATED and self.user is not None

    @property
    def is_loading(self) -> bool:
        return self.status == SessionStatus.LOADING

    def subscribe(self, listener: SessionListener) -> None:
        """Register a listener called with the new status on every transition."""
        self._listeners.append(listener)

    async def _transition(self, status: SessionStatus, user: Optional[User] = None) -> None:
        previous = self.status
        self.status = status
        self.user = user
        self.epoch += 1
        logger.info(f"Session {previous.value} -> {status.value}")
        await self._notify(status)

    async def _notify(self, status: SessionStatus) -> None:
        for listener in list(self._listeners):
            try:
                result = listener(status)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Session listener failed")

    async def _handle_unauthorized(self) -> None:
        """Hook from the HTTP facade after a 401 cleared the token."""
        if self.status == SessionStatus.ANONYMOUS:
            return
        logger.info("Session invalidated by 401")
        await self._transition(SessionStatus.ANONYMOUS)

    # ==================== LIFECYCLE ====================

    async def start(self) -> SessionStatus:
        """
        Resolve the session at application start.

        With a stored token the profile is fetched; any failure discards
        the token and leaves the session anonymous (no retry).
        """
        if not self.client.get_token():
            await self._transition(SessionStatus.ANONYMOUS)
            return self.status

        await self._transition(SessionStatus.LOADING)
        await self.refresh_user()
        return self.status

    async def refresh_user(self) -> Optional[User]:
        """Re-resolve the identity from the stored token."""
        try:
            response = await self.client.get("/auth/profile")
            user = User.model_validate(response["user"])
        except (StorefrontError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Failed to refresh user: {type(e).__name__}: {e}")
            self.client.clear_token()
            if self.status != SessionStatus.ANONYMOUS:
                await self._transition(SessionStatus.ANONYMOUS)
            return None

        await self._transition(SessionStatus.AUTHENTICATED, user)
        return user

    async def login(self, email: str, password: str) -> User:
        response = await self.client.post("/auth/login", json={"email": email, "password": password})
        return await self._accept_auth_response(response)

    async def register(self, name: str, email: str, phone: str, password: str) -> User:
        payload = {"name": name, "email": email, "phone": phone, "password": password}
        response = await self.client.post("/auth/register", json=payload)
        return await self._accept_auth_response(response)

    async def admin_login(self, email: str, password: str) -> User:
        logger.info(f"Admin login attempt for {sanitize_string_for_logging(email)}")
        response = await self.client.post("/auth/admin/login", json={"email": email, "password": password})
        return await self._accept_auth_response(response)

    async def logout(self) -> None:
        """Drop the identity and token, then go to the application root."""
        self.client.clear_token()
        await self._transition(SessionStatus.ANONYMOUS)
        self.client.navigator.to_home()

    async def update_profile(self, **fields: Any) -> User:
        """Update profile fields (name, phone, addresses...) and keep the result."""
        response = await self.client.put("/auth/profile", json=_camel_case(fields))
        user = User.model_validate(response["user"])
        self.user = user
        return user

    # ==================== PASSWORD RECOVERY ====================

    async def forgot_password(self, email: str) -> str:
        """
        Ask the backend to mail a password reset link.

        The backend answers the same way whether or not the address is
        registered, so success says nothing about the account.
        """
        email = (email or "").strip()
        if "@" not in email:
            raise ValidationError(ERROR_INVALID_EMAIL)

        response = await self.client.request(
            "POST", "/auth/forgot-password", json={"email": email}, authenticated=False
        )
        logger.info(f"Password reset requested for {sanitize_string_for_logging(email)}")
        self.client.notifier.success(NOTICE_RESET_LINK_SENT)
        return (response or {}).get("message", NOTICE_RESET_LINK_SENT)

    async def verify_reset_token(self, token: str) -> bool:
        """Check a mailed reset token before asking for the new password."""
        if not token:
            return False
        try:
            response = await self.client.request(
                "GET",
                f"/auth/verify-reset-token/{path_segment(token)}",
                authenticated=False,
                quiet=True,
            )
        except ApiError as e:
            logger.info(f"Reset token {sanitize_id_for_logging(token)} rejected ({e.status_code})")
            return False
        return bool(isinstance(response, dict) and response.get("valid"))

    async def reset_password(self, token: str, password: str, confirm_password: str) -> str:
        """Set a new password with a reset token. Does not sign the user in."""
        validate_new_password(password, confirm_password)
        payload = {"token": token, "password": password, "confirmPassword": confirm_password}
        response = await self.client.request(
            "POST", "/auth/reset-password", json=payload, authenticated=False
        )
        self.client.notifier.success(NOTICE_PASSWORD_RESET)
        return (response or {}).get("message", NOTICE_PASSWORD_RESET)

    # ==================== INTERNAL HELPERS ====================

    async def _accept_auth_response(self, response: Dict[str, Any]) -> User:
        auth = AuthResponse.model_validate(response)
        self.client.set_token(auth.token)
        logger.info(
            f"Signed in user {sanitize_id_for_logging(auth.user.id)} "
            f"(role={auth.user.role.value})"
        )
        await self._transition(SessionStatus.AUTHENTICATED, auth.user)
        return auth.user


def _camel_case(fields: Dict[str, Any]) -> Dict[str, Any]:
    result = {}
    for key, value in fields.items():
        head, *rest = key.split("_")
        result[head + "".join(part.title() for part in rest)] = value
    return result


def validate_new_password(password: str, confirm_password: Optional[str] = None) -> None:
    """Reject a new password locally before it is sent."""
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(ERROR_PASSWORD_TOO_SHORT)
    if confirm_password is not None and confirm_password != password:
        raise ValidationError(ERROR_PASSWORD_MISMATCH)
