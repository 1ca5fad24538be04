"""Session state machine spanning OTP and wallet-signature sign-in."""

from __future__ import annotations

import inspect
import json
from collections import Counter
from typing import Callable

from loguru import logger
from pydantic import ValidationError

from app.domain import SessionState
from app.schemas import AuthResponse, UserIdentity
from app.storage import KeyValueStorage
from gateway.client import RequestFailed, is_auth_failure
from gateway.credentials import CredentialStore
from gateway.endpoints import MarketApi

from .base import WalletSigner
from .state import StateStore

OTP_REQUEST_FAILED = "Failed to send OTP"
OTP_VERIFY_FAILED = "Invalid OTP code"
WALLET_LOGIN_FAILED = "Wallet login failed"
IDENTITY_REFRESH_FAILED = "Failed to load profile"


class SignerDeclined(Exception):
    """The wallet signer refused or failed to sign the challenge."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def _failure_message(exc: Exception, fallback: str) -> str:
    if isinstance(exc, (RequestFailed, SignerDeclined)) and exc.message:
        return exc.message
    return fallback


class SessionController:
    """Owns :class:`SessionState` and every transition between its states.

    Actions never raise request or validation failures to the caller: they
    record ``last_error`` and return ``False`` instead. ``loading`` stays true
    while at least one action is in flight, so overlapping calls cannot leave
    it stuck.
    """

    def __init__(
        self,
        api: MarketApi,
        credentials: CredentialStore,
        *,
        storage: KeyValueStorage | None = None,
        snapshot_key: str = "auth-storage",
    ) -> None:
        self._api = api
        self._credentials = credentials
        self._storage = storage
        self._snapshot_key = snapshot_key
        self._store: StateStore[SessionState] = StateStore(SessionState())
        self._in_flight: Counter[str] = Counter()
        self._last_persisted: str | None = None
        self._store.subscribe(self._persist_snapshot)

    # observation

    def get(self) -> SessionState:
        return self._store.get()

    def subscribe(self, listener: Callable[[SessionState], None]) -> Callable[[], None]:
        return self._store.subscribe(listener)

    def cached_identity(self) -> UserIdentity | None:
        """Return the last persisted identity; for optimistic display only."""

        if self._storage is None:
            return None
        raw = self._storage.get(self._snapshot_key)
        if not raw:
            return None
        try:
            snapshot = json.loads(raw)
            identity = snapshot.get("identity") if isinstance(snapshot, dict) else None
            return UserIdentity.model_validate(identity) if identity else None
        except (ValueError, ValidationError):
            logger.warning("Ignoring unreadable cached session snapshot")
            return None

    # loading bookkeeping

    def _begin(self, action: str, *, clear_error: bool = True) -> None:
        self._in_flight[action] += 1
        changes: dict[str, object] = {"loading": True}
        if clear_error:
            changes["last_error"] = None
        self._store.update(**changes)

    def _release(self, action: str) -> bool:
        """Mark one call of ``action`` settled; return whether anything is still running."""

        self._in_flight[action] -= 1
        if self._in_flight[action] <= 0:
            del self._in_flight[action]
        return bool(self._in_flight)

    def _finish(self, action: str, **changes: object) -> None:
        self._store.update(loading=self._release(action), **changes)

    def _sign_in(self, action: str, response: AuthResponse) -> None:
        self._credentials.set(response.token)
        self._store.set(SessionState.signed_in(response.user, loading=self._release(action)))
        logger.info("Signed in as user {}", response.user.id)

    def _persist_snapshot(self, state: SessionState) -> None:
        if self._storage is None:
            return
        serialized = json.dumps(state.persisted_view())
        if serialized == self._last_persisted:
            return
        self._storage.set(self._snapshot_key, serialized)
        self._last_persisted = serialized

    # actions

    async def check_auth(self) -> None:
        """Rehydrate the session from the stored credential; safe to repeat."""

        token = self._credentials.get() or self._credentials.hydrate()
        if not token:
            self._store.update(identity=None, authenticated=False, ready=True)
            return

        self._begin("check_auth", clear_error=False)
        try:
            response = await self._api.current_user()
        except (RequestFailed, ValidationError) as exc:
            logger.info("Stored credential rejected during rehydration: {}", exc)
            if self._credentials.clear_if(token):
                self._finish("check_auth", identity=None, authenticated=False, ready=True)
            else:
                self._finish("check_auth", ready=True)
            return

        if self._credentials.get() != token:
            # Another action replaced the credential while this check was in flight.
            self._finish("check_auth", ready=True)
            return
        self._finish(
            "check_auth", identity=response.user, authenticated=True, ready=True
        )

    async def request_otp(self, email: str) -> bool:
        self._begin("request_otp")
        try:
            await self._api.request_otp(email)
        except (RequestFailed, ValidationError) as exc:
            self._finish("request_otp", last_error=_failure_message(exc, OTP_REQUEST_FAILED))
            return False
        self._finish("request_otp", last_error=None)
        return True

    async def verify_otp(self, email: str, code: str) -> bool:
        self._begin("verify_otp")
        try:
            response = await self._api.verify_otp(email, code)
        except (RequestFailed, ValidationError) as exc:
            self._finish("verify_otp", last_error=_failure_message(exc, OTP_VERIFY_FAILED))
            return False
        self._sign_in("verify_otp", response)
        return True

    async def login_with_wallet(self, address: str, sign: WalletSigner) -> bool:
        self._begin("login_with_wallet")
        try:
            challenge = await self._api.wallet_challenge(address)
            signature = await self._sign(sign, challenge.message)
            response = await self._api.verify_wallet_signature(challenge.message, signature)
        except (RequestFailed, SignerDeclined, ValidationError) as exc:
            self._finish(
                "login_with_wallet", last_error=_failure_message(exc, WALLET_LOGIN_FAILED)
            )
            return False
        self._sign_in("login_with_wallet", response)
        return True

    @staticmethod
    async def _sign(sign: WalletSigner, message: str) -> str:
        try:
            result = sign(message)
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            raise SignerDeclined(str(exc)) from exc
        if not isinstance(result, str) or not result:
            raise SignerDeclined("Wallet returned an empty signature")
        return result

    async def refresh_identity(self) -> bool:
        """Refetch the identity and replace it wholesale."""

        if not self._credentials.get():
            return False
        self._begin("refresh_identity")
        try:
            response = await self._api.current_user()
        except (RequestFailed, ValidationError) as exc:
            self._finish(
                "refresh_identity", last_error=_failure_message(exc, IDENTITY_REFRESH_FAILED)
            )
            if is_auth_failure(exc):
                await self.logout()
            return False
        self._finish("refresh_identity", identity=response.user, authenticated=True)
        return True

    async def logout(self) -> None:
        self._begin("logout", clear_error=False)
        try:
            await self._api.logout()
        except RequestFailed as exc:
            logger.debug("Server-side logout failed, clearing locally anyway: {}", exc)
        finally:
            self._credentials.clear()
            self._store.set(SessionState.anonymous(loading=self._release("logout")))
            logger.info("Session cleared")

    def clear_error(self) -> None:
        self._store.update(last_error=None)


__all__ = ["SessionController", "SignerDeclined"]
