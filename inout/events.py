from typing import Callable, List, Optional

from inout.domain import AuthState, User
from inout.logger import get_logger, set_owner_context

__all__ = ['AuthNotifier', 'AuthListener', 'Unsubscribe']

AuthListener = Callable[[AuthState], None]
Unsubscribe = Callable[[], None]

logger = get_logger("events")


class AuthNotifier:
    """Delivers immutable AuthState snapshots to registered listeners.

    A listener gets the current snapshot as soon as it registers, then every
    change after that, until it calls the returned unsubscribe handle.
    """

    def __init__(self, initial: Optional[AuthState] = None):
        self._state = initial or AuthState(user=None, is_loading=True)
        self._listeners: List[AuthListener] = []

    @property
    def state(self) -> AuthState:
        return self._state

    def on_auth_state_changed(self, listener: AuthListener) -> Unsubscribe:
        self._listeners.append(listener)
        self._deliver(listener, self._state)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, state: AuthState) -> None:
        self._state = state
        set_owner_context(state.user.id if state.user else None)
        for listener in list(self._listeners):
            self._deliver(listener, state)

    def sign_in(self, user: User) -> None:
        logger.info(f"Signed in as {user.email}")
        self.publish(AuthState(user=user, is_loading=False))

    def sign_out(self) -> None:
        logger.info("Signed out")
        self.publish(AuthState(user=None, is_loading=False))

    def refresh_user(self, user: User) -> None:
        """Publish a new snapshot after the signed-in user's profile changed."""
        self.publish(AuthState(user=user, is_loading=self._state.is_loading))

    def set_loading(self) -> None:
        self.publish(AuthState(user=self._state.user, is_loading=True))

    def _deliver(self, listener: AuthListener, state: AuthState) -> None:
        try:
            listener(state)
        except Exception:
            logger.exception(f"Auth listener {getattr(listener, '__name__', listener)!r} failed")
