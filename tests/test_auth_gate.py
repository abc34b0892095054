from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from idp.auth.gate import is_authenticated
from idp.auth.session import AUTHENTICATED_AT, AUTHENTICATED_USER, CSRF, Session, set_authenticated_user

WEEK_MS = 7 * 24 * 60 * 60 * 1000
NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _session(**fields) -> Session:  # type: ignore[no-untyped-def]
    return Session({CSRF: "tok", **fields})


def test_fresh_authentication_returns_identity() -> None:
    s = _session(authenticatedUser="a@example.com", authenticatedAt=NOW.isoformat())
    assert is_authenticated(s, WEEK_MS, now=NOW) == "a@example.com"
    assert s[AUTHENTICATED_USER] == "a@example.com"


def test_authentication_older_than_window_is_cleared() -> None:
    s = _session(authenticatedUser="a@example.com", authenticatedAt=(NOW - timedelta(days=8)).isoformat())
    assert is_authenticated(s, WEEK_MS, now=NOW) is None
    assert AUTHENTICATED_USER not in s
    assert dict(s) == {CSRF: "tok"}
    # Stays cleared on later reads.
    assert is_authenticated(s, WEEK_MS, now=NOW) is None


def test_exactly_at_window_edge_is_still_valid() -> None:
    s = _session(authenticatedUser="a@example.com", authenticatedAt=(NOW - timedelta(days=7)).isoformat())
    assert is_authenticated(s, WEEK_MS, now=NOW) == "a@example.com"


@pytest.mark.parametrize("at", [None, "", "not a date", 12345])
def test_bad_timestamp_clears_session(at) -> None:
    s = _session(authenticatedUser="a@example.com")
    if at is not None:
        s[AUTHENTICATED_AT] = at
    assert is_authenticated(s, WEEK_MS, now=NOW) is None
    assert dict(s) == {CSRF: "tok"}


def test_naive_timestamp_is_treated_as_utc() -> None:
    s = _session(authenticatedUser="a@example.com", authenticatedAt="2024-05-01T11:00:00")
    assert is_authenticated(s, 60 * 60 * 1000, now=NOW) == "a@example.com"
    assert is_authenticated(s, 60 * 60 * 1000 - 1, now=NOW) is None


def test_unauthenticated_session_is_left_alone() -> None:
    s = _session(pendingCreation="p")
    assert is_authenticated(s, WEEK_MS, now=NOW) is None
    assert s["pendingCreation"] == "p"


def test_set_then_check_round_trip() -> None:
    s = _session()
    set_authenticated_user(s, "b@example.com", now=NOW)
    assert is_authenticated(s, WEEK_MS, now=NOW + timedelta(minutes=5)) == "b@example.com"


def test_naive_now_is_treated_as_utc() -> None:
    naive_now = datetime.now(timezone.utc).replace(tzinfo=None)
    s = _session()
    set_authenticated_user(s, "c@example.com", now=naive_now)
    assert is_authenticated(s, WEEK_MS, now=naive_now) == "c@example.com"
    assert is_authenticated(s, WEEK_MS, now=naive_now + timedelta(days=8)) is None


def test_local_naive_clock_round_trip() -> None:
    s = _session()
    set_authenticated_user(s, "d@example.com", now=datetime.now())
    assert is_authenticated(s, WEEK_MS, now=datetime.now()) == "d@example.com"
