from inout.domain import AuthState, User
from inout.events import AuthNotifier

ALEX = User(id="u1", email="alex@example.com", display_name="Alex")


def test_listener_gets_current_state_on_register():
    notifier = AuthNotifier()
    seen = []
    notifier.on_auth_state_changed(seen.append)

    assert seen == [AuthState(user=None, is_loading=True)]


def test_sign_in_and_out_publish_snapshots():
    notifier = AuthNotifier(AuthState(user=None, is_loading=False))
    seen = []
    notifier.on_auth_state_changed(seen.append)

    notifier.sign_in(ALEX)
    notifier.sign_out()

    assert [s.user for s in seen] == [None, ALEX, None]
    assert not any(s.is_loading for s in seen)
    assert notifier.state == AuthState(user=None, is_loading=False)


def test_set_loading_keeps_user():
    notifier = AuthNotifier()
    notifier.sign_in(ALEX)
    notifier.set_loading()
    assert notifier.state == AuthState(user=ALEX, is_loading=True)


def test_unsubscribe_stops_delivery():
    notifier = AuthNotifier()
    seen = []
    unsubscribe = notifier.on_auth_state_changed(seen.append)

    unsubscribe()
    notifier.sign_in(ALEX)
    unsubscribe()

    assert len(seen) == 1


def test_multiple_listeners():
    notifier = AuthNotifier()
    first, second = [], []
    notifier.on_auth_state_changed(first.append)
    notifier.on_auth_state_changed(second.append)

    notifier.sign_in(ALEX)

    assert first[-1].user == ALEX
    assert second[-1].user == ALEX


def test_failing_listener_does_not_block_others():
    notifier = AuthNotifier()
    seen = []

    def broken(state):
        raise RuntimeError("listener blew up")

    notifier.on_auth_state_changed(broken)
    notifier.on_auth_state_changed(seen.append)
    notifier.sign_in(ALEX)

    assert seen[-1].user == ALEX


def test_refresh_user_publishes_new_profile():
    notifier = AuthNotifier()
    seen = []
    notifier.sign_in(ALEX)
    notifier.on_auth_state_changed(seen.append)

    renamed = User(id="u1", email="alex@example.com", display_name="Alexandra")
    notifier.refresh_user(renamed)

    assert [s.user.display_name for s in seen] == ["Alex", "Alexandra"]
    assert notifier.state.user == renamed
