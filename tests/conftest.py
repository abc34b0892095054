"""
Pytest config.

Pins the repo root on sys.path so `import idp` works without installing the package,
and provides a fast-hashing config plus an app/client pair wired to in-memory services.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


def _ensure_repo_root_on_syspath() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    repo_root_str = str(repo_root)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


_ensure_repo_root_on_syspath()


class RecordingMailer:
    def __init__(self) -> None:
        self.sent = []

    def send_verification(self, email, token, site, kind):  # type: ignore[no-untyped-def]
        self.sent.append({"email": email, "token": token, "site": site, "kind": kind})

    def last_token(self, email: str) -> str:
        for item in reversed(self.sent):
            if item["email"] == email:
                return item["token"]
        raise AssertionError(f"no verification sent to {email}")


@pytest.fixture(autouse=True)
def _clear_config_cache():
    from idp.auth.config import load_config

    load_config.cache_clear()
    yield
    load_config.cache_clear()


@pytest.fixture
def cfg():
    from idp.auth.config import IdpConfig

    # bcrypt's minimum cost keeps password tests fast.
    return IdpConfig(cookie_secret="test-secret-key-for-testing-purposes-only", bcrypt_work_factor=4)


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def services(mailer):
    from idp.accounts.store import InMemoryAccountStore
    from idp.wsapi.context import Services

    return Services(accounts=InMemoryAccountStore(), mailer=mailer)


@pytest.fixture
def app(cfg, services):
    from idp.api.server import create_app

    return create_app(cfg, services=services)


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient

    return TestClient(app)


class FakeView:
    """Dialog view that records what it was asked to show."""

    def __init__(self) -> None:
        self.calls = []

    def render_error(self, template, info):  # type: ignore[no-untyped-def]
        self.calls.append(("render_error", template, info))

    def set_site_name(self, hostname):  # type: ignore[no-untyped-def]
        self.calls.append(("set_site_name", hostname))

    def authenticate(self, email=None):  # type: ignore[no-untyped-def]
        self.calls.append(("authenticate", email))

    def pick_email(self, origin):  # type: ignore[no-untyped-def]
        self.calls.append(("pick_email", origin))

    def check_registration(self, email):  # type: ignore[no-untyped-def]
        self.calls.append(("check_registration", email))


class Recorder:
    """onsuccess/onerror callbacks of a dialog caller."""

    def __init__(self) -> None:
        self.events = []

    def onsuccess(self, assertion):  # type: ignore[no-untyped-def]
        self.events.append(("success", assertion))

    def onerror(self, reason):  # type: ignore[no-untyped-def]
        self.events.append(("error", reason))


@pytest.fixture
def view() -> FakeView:
    return FakeView()


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()
