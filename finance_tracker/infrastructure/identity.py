"""
Identity service clients.

``IdentityProvider`` owns the current identity and the auth-state listeners;
``FirebaseIdentityClient`` talks to the Firebase Identity Toolkit REST API.
"""
import asyncio
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

import httpx
import structlog

from ..config import Settings, get_settings
from ..models.auth import IdentityUser
from ..utils.exceptions import ExternalServiceError

logger = structlog.get_logger()

AuthStateListener = Callable[[Optional[IdentityUser]], Awaitable[None]]
Unsubscribe = Callable[[], None]

# Provider error codes
INVALID_CREDENTIAL = "auth/invalid-credential"
EMAIL_ALREADY_IN_USE = "auth/email-already-in-use"
USER_NOT_FOUND = "auth/user-not-found"
TOO_MANY_REQUESTS = "auth/too-many-requests"
USER_DISABLED = "auth/user-disabled"
WEAK_PASSWORD = "auth/weak-password"
INVALID_EMAIL = "auth/invalid-email"
INVALID_ID_TOKEN = "auth/invalid-user-token"
NETWORK_REQUEST_FAILED = "auth/network-request-failed"
INTERNAL_ERROR = "auth/internal-error"

# Identity Toolkit error messages -> provider codes
REST_ERROR_CODES: Dict[str, str] = {
    "INVALID_LOGIN_CREDENTIALS": INVALID_CREDENTIAL,
    "INVALID_PASSWORD": INVALID_CREDENTIAL,
    "EMAIL_EXISTS": EMAIL_ALREADY_IN_USE,
    "EMAIL_NOT_FOUND": USER_NOT_FOUND,
    "USER_NOT_FOUND": USER_NOT_FOUND,
    "TOO_MANY_ATTEMPTS_TRY_LATER": TOO_MANY_REQUESTS,
    "USER_DISABLED": USER_DISABLED,
    "WEAK_PASSWORD": WEAK_PASSWORD,
    "INVALID_EMAIL": INVALID_EMAIL,
    "MISSING_EMAIL": INVALID_EMAIL,
    "INVALID_ID_TOKEN": INVALID_ID_TOKEN,
    "TOKEN_EXPIRED": INVALID_ID_TOKEN,
    "INVALID_REFRESH_TOKEN": INVALID_ID_TOKEN,
}

# Codes caused by the request itself rather than the service
CLIENT_ERROR_CODES = {WEAK_PASSWORD, INVALID_EMAIL, INVALID_ID_TOKEN, USER_DISABLED}


class IdentityError(ExternalServiceError):
    """Error reported by the identity service, carrying its provider code."""

    def __init__(self, provider_code: str, message: Optional[str] = None):
        self.provider_code = provider_code
        super().__init__(
            message=message or f"Identity service error ({provider_code})",
            service_name="identity",
            details=[f"Provider code: {provider_code}"],
            code="IDENTITY_PROVIDER_ERROR",
            status_code=400 if provider_code in CLIENT_ERROR_CODES else 502
        )

    @classmethod
    def from_rest_message(cls, rest_message: str) -> "IdentityError":
        """Build from an Identity Toolkit message such as ``WEAK_PASSWORD : ...``."""
        key = rest_message.split(":", 1)[0].strip()
        return cls(REST_ERROR_CODES.get(key, INTERNAL_ERROR), rest_message)


class IdentityProvider(ABC):
    """
    Identity service seam.

    Holds the current identity and notifies auth-state listeners on every
    transition. Subclasses implement the calls to the actual service.
    """

    def __init__(self):
        self._current_user: Optional[IdentityUser] = None
        self._listeners: List[AuthStateListener] = []
        self._pending: Set[asyncio.Task] = set()

    @property
    def current_user(self) -> Optional[IdentityUser]:
        return self._current_user

    def on_auth_state_changed(self, listener: AuthStateListener) -> Unsubscribe:
        """
        Register a listener for auth-state transitions.

        The listener is first called asynchronously with the state current
        when the call runs, then awaited on each transition. Returns a
        teardown handle.
        """
        self._listeners.append(listener)

        task = asyncio.get_running_loop().create_task(self._deliver_initial(listener))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _deliver_initial(self, listener: AuthStateListener) -> None:
        if listener in self._listeners:
            await self._deliver(listener, self._current_user)

    async def _deliver(self, listener: AuthStateListener, user: Optional[IdentityUser]) -> None:
        try:
            await listener(user)
        except Exception as e:
            logger.error(
                "Auth state listener failed",
                uid=user.uid if user else None,
                error=str(e)
            )

    async def _set_current_user(self, user: Optional[IdentityUser]) -> None:
        """Replace the current identity and notify listeners in order."""
        self._current_user = user
        for listener in list(self._listeners):
            await self._deliver(listener, user)

    async def sign_in_with_password(self, email: str, password: str) -> IdentityUser:
        """Sign in and make the identity current."""
        user = await self._sign_in(email, password)
        await self._set_current_user(user)
        logger.info("Identity signed in", uid=user.uid, email_verified=user.email_verified)
        return user

    async def create_user_with_password(self, email: str, password: str) -> IdentityUser:
        """Create an identity; like the hosted SDKs, it becomes current."""
        user = await self._sign_up(email, password)
        await self._set_current_user(user)
        logger.info("Identity created", uid=user.uid)
        return user

    async def sign_out(self) -> None:
        """Forget the current identity."""
        previous = self._current_user
        await self._set_current_user(None)
        if previous is not None:
            logger.info("Identity signed out", uid=previous.uid)

    @abstractmethod
    async def _sign_in(self, email: str, password: str) -> IdentityUser:
        """Verify credentials with the service."""

    @abstractmethod
    async def _sign_up(self, email: str, password: str) -> IdentityUser:
        """Create an account with the service."""

    @abstractmethod
    async def send_email_verification(self, user: IdentityUser) -> None:
        """Ask the service to email a verification link."""

    @abstractmethod
    async def send_password_reset_email(self, email: str) -> None:
        """Ask the service to email a password reset link."""

    async def close(self) -> None:
        """Release resources held by the client."""
        for task in list(self._pending):
            task.cancel()
        self._pending.clear()


class FirebaseIdentityClient(IdentityProvider):
    """Firebase Authentication over the Identity Toolkit REST API."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        super().__init__()
        self._settings = settings or get_settings()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._settings.identity_request_timeout,
                transport=self._transport
            )
        return self._client

    async def _request(self, url: str, **kwargs: Any) -> Dict[str, Any]:
        """Call the service and translate its error payloads."""
        params = {"key": self._settings.firebase_api_key}

        try:
            response = await self.client.post(url, params=params, **kwargs)
        except httpx.HTTPError as e:
            logger.error("Identity service unreachable", url=url, error=str(e))
            raise IdentityError(NETWORK_REQUEST_FAILED, "Identity service is unreachable")

        try:
            data = response.json() if response.content else {}
        except ValueError:
            data = {}

        if response.status_code >= 400:
            rest_message = (data.get("error") or {}).get("message", "") if isinstance(data, dict) else ""
            error = IdentityError.from_rest_message(rest_message or f"HTTP_{response.status_code}")
            logger.warning(
                "Identity service rejected request",
                url=url,
                status_code=response.status_code,
                provider_code=error.provider_code
            )
            raise error

        return data

    async def _accounts(self, action: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request(f"{self._settings.identity_base_url}/accounts:{action}", json=payload)

    def _token_expiry(self, expires_in: Any) -> datetime:
        return datetime.utcnow() + timedelta(seconds=int(expires_in or 3600))

    async def _sign_in(self, email: str, password: str) -> IdentityUser:
        data = await self._accounts("signInWithPassword", {
            "email": email,
            "password": password,
            "returnSecureToken": True
        })

        # signInWithPassword does not report verification status
        lookup = await self._accounts("lookup", {"idToken": data["idToken"]})
        account = (lookup.get("users") or [{}])[0]

        return IdentityUser(
            uid=data["localId"],
            email=data.get("email", email),
            email_verified=bool(account.get("emailVerified", False)),
            id_token=data["idToken"],
            refresh_token=data.get("refreshToken"),
            token_expires_at=self._token_expiry(data.get("expiresIn"))
        )

    async def _sign_up(self, email: str, password: str) -> IdentityUser:
        data = await self._accounts("signUp", {
            "email": email,
            "password": password,
            "returnSecureToken": True
        })

        return IdentityUser(
            uid=data["localId"],
            email=data.get("email", email),
            email_verified=False,
            id_token=data["idToken"],
            refresh_token=data.get("refreshToken"),
            token_expires_at=self._token_expiry(data.get("expiresIn"))
        )

    async def _fresh_id_token(self, user: IdentityUser) -> str:
        """Return a usable ID token, refreshing it when it is about to expire."""
        if not user.token_expired() or not user.refresh_token:
            return user.id_token or ""

        data = await self._request(
            self._settings.secure_token_url,
            data={"grant_type": "refresh_token", "refresh_token": user.refresh_token}
        )
        refreshed = user.model_copy(update={
            "id_token": data["id_token"],
            "refresh_token": data.get("refresh_token", user.refresh_token),
            "token_expires_at": self._token_expiry(data.get("expires_in"))
        })

        if self._current_user is not None and self._current_user.uid == user.uid:
            self._current_user = refreshed

        logger.debug("ID token refreshed", uid=user.uid)
        return refreshed.id_token

    async def send_email_verification(self, user: IdentityUser) -> None:
        id_token = await self._fresh_id_token(user)
        await self._accounts("sendOobCode", {"requestType": "VERIFY_EMAIL", "idToken": id_token})
        logger.info("Verification email requested", uid=user.uid)

    async def send_password_reset_email(self, email: str) -> None:
        await self._accounts("sendOobCode", {"requestType": "PASSWORD_RESET", "email": email})
        logger.info("Password reset email requested")

    async def close(self) -> None:
        await super().close()
        if self._client is not None:
            await self._client.aclose()
            self._client = None


# Global identity client instance
_identity_client: Optional[FirebaseIdentityClient] = None


def get_identity_client() -> FirebaseIdentityClient:
    """Get the global identity client instance."""
    global _identity_client
    if _identity_client is None:
        _identity_client = FirebaseIdentityClient()
    return _identity_client


async def cleanup_identity_client():
    """Close the identity client."""
    global _identity_client
    if _identity_client:
        await _identity_client.close()
        _identity_client = None
        logger.info("Identity client closed")
