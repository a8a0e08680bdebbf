"""
Session manager: who is logged in, their cached profile, and every
operation that changes identity.
"""
import asyncio
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

import structlog

from ..infrastructure import FirestoreService, IdentityProvider, get_firestore
from ..infrastructure.identity import (
    EMAIL_ALREADY_IN_USE,
    INVALID_CREDENTIAL,
    TOO_MANY_REQUESTS,
    USER_NOT_FOUND,
    IdentityError,
    Unsubscribe,
)
from ..models.auth import (
    IdentityUser,
    ProfileFields,
    SessionState,
    UserProfile,
    UserProfileUpdate,
    UserSettings,
)
from ..utils.constants import SessionStatus, settings_document_path, user_document_path
from ..utils.exceptions import (
    EmailAlreadyInUseError,
    InvalidCredentialsError,
    NoAccountFoundError,
    NotAuthenticatedError,
    RateLimitError,
    UnverifiedEmailError,
)

logger = structlog.get_logger()

SessionObserver = Callable[[SessionState], Awaitable[None]]


class SessionManager:
    """
    Single owner of the session state.

    State changes only through the auth-state callback and the operations
    below; consumers read snapshots through ``state``.
    """

    def __init__(
        self,
        identity: IdentityProvider,
        firestore: Optional[FirestoreService] = None
    ):
        self.identity = identity
        self.firestore = firestore or get_firestore()

        self._user: Optional[IdentityUser] = None
        self._profile: Optional[UserProfile] = None
        self._loading = True
        self._started = False
        self._ready = asyncio.Event()
        self._unsubscribe: Optional[Unsubscribe] = None
        self._observers: List[SessionObserver] = []

    # State

    @property
    def current_user(self) -> Optional[IdentityUser]:
        return self._user

    @property
    def user_profile(self) -> Optional[UserProfile]:
        return self._profile

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def status(self) -> SessionStatus:
        if not self._started:
            return SessionStatus.UNINITIALIZED
        if self._loading:
            return SessionStatus.LOADING
        if self._user is not None:
            return SessionStatus.AUTHENTICATED
        return SessionStatus.ANONYMOUS

    @property
    def state(self) -> SessionState:
        return SessionState(
            user=self._user,
            profile=self._profile,
            loading=self._loading,
            status=self.status
        )

    # Lifecycle

    async def start(self) -> None:
        """Subscribe to auth-state changes; the first callback ends loading."""
        if self._unsubscribe is not None:
            return

        self._started = True
        self._loading = True
        self._unsubscribe = self.identity.on_auth_state_changed(self._handle_auth_state)
        logger.info("Session manager started")

    async def wait_until_ready(self) -> SessionState:
        """Wait until the first auth state is known."""
        await self._ready.wait()
        return self.state

    async def stop(self) -> None:
        """Tear down the auth-state subscription."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
            logger.info("Session manager stopped")

    def subscribe(self, observer: SessionObserver) -> Unsubscribe:
        """Observe session changes. Returns a teardown handle."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    async def _handle_auth_state(self, user: Optional[IdentityUser]) -> None:
        previous_uid = self._user.uid if self._user else None
        self._user = user

        if user is not None:
            if user.uid != previous_uid:
                self._profile = None
            await self._fetch_user_profile(user.uid)
        else:
            self._profile = None

        self._loading = False
        self._ready.set()

        logger.info(
            "Auth state changed",
            uid=user.uid if user else None,
            status=self.status.value,
            has_profile=self._profile is not None
        )
        await self._notify_observers()

    async def _notify_observers(self) -> None:
        state = self.state
        for observer in list(self._observers):
            try:
                await observer(state)
            except Exception as e:
                logger.error("Session observer failed", error=str(e))

    async def _fetch_user_profile(self, uid: str) -> None:
        """Refresh the cached profile. Failures are logged, never raised."""
        try:
            doc = await self.firestore.get_document(user_document_path(uid))
            self._profile = UserProfile.model_validate(doc) if doc else None
        except Exception as e:
            logger.error("Error fetching user profile", uid=uid, error=str(e))

    # Operations

    async def sign_in(self, email: str, password: str) -> None:
        """Sign in; unverified accounts are signed straight back out."""
        try:
            user = await self.identity.sign_in_with_password(email, password)

            if not user.email_verified:
                await self.identity.sign_out()
                raise UnverifiedEmailError()

            await self._fetch_user_profile(user.uid)
            await self._notify_observers()

        except IdentityError as e:
            if e.provider_code == INVALID_CREDENTIAL:
                raise InvalidCredentialsError()
            raise

    async def sign_up(self, email: str, password: str, profile: ProfileFields) -> None:
        """
        Register an account.

        Writes the profile and default settings, sends the verification
        email and signs out: the caller must verify, then sign in.
        """
        try:
            user = await self.identity.create_user_with_password(email, password)
        except IdentityError as e:
            if e.provider_code == EMAIL_ALREADY_IN_USE:
                raise EmailAlreadyInUseError()
            raise

        try:
            now = datetime.utcnow()
            user_profile = UserProfile(
                **profile.model_dump(),
                email=email,
                created_at=now,
                updated_at=now
            )

            await self.firestore.set_document(user_document_path(user.uid), user_profile)
            await self.firestore.set_document(
                settings_document_path(user.uid),
                UserSettings(created_at=now)
            )

            await self.identity.send_email_verification(user)

            logger.info("User registered", uid=user.uid)
        finally:
            await self.identity.sign_out()

    async def logout(self) -> None:
        """Sign out and clear the cached profile."""
        try:
            await self.identity.sign_out()
            self._profile = None
        except Exception as e:
            logger.error("Error signing out", error=str(e))
            raise

    async def reset_password(self, email: str) -> None:
        """Send a password reset email."""
        try:
            await self.identity.send_password_reset_email(email)
        except IdentityError as e:
            if e.provider_code == USER_NOT_FOUND:
                raise NoAccountFoundError()
            raise

    async def verify_email(self) -> None:
        """Resend the verification email for an unverified current user."""
        user = self._user
        if user is None or user.email_verified:
            return

        try:
            await self.identity.send_email_verification(user)
        except IdentityError as e:
            if e.provider_code == TOO_MANY_REQUESTS:
                raise RateLimitError()
            raise

    async def update_user_profile(
        self,
        fields: Union[UserProfileUpdate, Dict[str, Any]]
    ) -> Optional[UserProfile]:
        """Merge the given fields into the profile and refresh the cache."""
        if self._user is None:
            raise NotAuthenticatedError()

        if not isinstance(fields, UserProfileUpdate):
            fields = UserProfileUpdate.model_validate(fields)

        uid = self._user.uid
        try:
            update = fields.to_document(exclude_unset=True, exclude_none=True)
            update["updatedAt"] = datetime.utcnow()

            await self.firestore.set_document(user_document_path(uid), update, merge=True)
            await self._fetch_user_profile(uid)
        except Exception as e:
            logger.error("Error updating profile", uid=uid, error=str(e))
            raise

        await self._notify_observers()
        return self._profile
