from __future__ import annotations

from dataclasses import replace

from fastapi.testclient import TestClient

from idp.api.server import create_app


def _csrf(c: TestClient) -> str:
    return c.get("/wsapi/session_context").json()["csrf_token"]


def _post(c: TestClient, op: str, **body):  # type: ignore[no-untyped-def]
    return c.post(f"/wsapi/{op}", json={"csrf": _csrf(c), **body})


def test_new_user_flow_and_secondary_email(app, mailer) -> None:
    dialog = TestClient(app)
    verifier = TestClient(app)

    assert dialog.get("/wsapi/have_email", params={"email": "alice@example.com"}).json() == {"email_known": False}
    assert dialog.get("/wsapi/user_creation_status", params={"email": "alice@example.com"}).json() == {
        "status": "noRegistration"
    }

    r = _post(dialog, "stage_user", email="Alice@Example.com", site="https://rp.example")
    assert r.json() == {"success": True}
    token = mailer.last_token("alice@example.com")
    assert mailer.sent[-1]["kind"] == "new_user"
    assert mailer.sent[-1]["site"] == "https://rp.example"

    status = dialog.get("/wsapi/user_creation_status", params={"email": "alice@example.com"})
    assert status.json() == {"status": "pending"}

    # The email link is opened in another browser.
    assert verifier.get("/wsapi/email_for_token", params={"token": token}).json() == {"email": "alice@example.com"}
    r = _post(verifier, "complete_user_creation", token=token, **{"pass": "short"})
    assert r.status_code == 400
    r = _post(verifier, "complete_user_creation", token=token, **{"pass": "correct horse"})
    assert r.json() == {"success": True}
    assert verifier.get("/wsapi/session_context").json()["authenticated"] is True

    # The dialog sees completion and is signed in by it.
    status = dialog.get("/wsapi/user_creation_status", params={"email": "alice@example.com"})
    assert status.json() == {"status": "complete"}
    assert dialog.get("/wsapi/session_context").json()["authenticated"] is True
    assert dialog.get("/wsapi/list_emails").json() == {"emails": ["alice@example.com"]}
    assert dialog.get("/wsapi/have_email", params={"email": "alice@example.com"}).json() == {"email_known": True}

    # Add a second address.
    r = _post(dialog, "stage_email", email="alice@work.example", site="https://rp.example")
    assert r.json() == {"success": True}
    add_token = mailer.last_token("alice@work.example")
    assert mailer.sent[-1]["kind"] == "add_email"
    assert dialog.get("/wsapi/email_addition_status", params={"email": "alice@work.example"}).json() == {
        "status": "pending"
    }
    assert _post(verifier, "complete_email_addition", token=add_token).json() == {"success": True}
    assert dialog.get("/wsapi/email_addition_status", params={"email": "alice@work.example"}).json() == {
        "status": "complete"
    }
    assert dialog.get("/wsapi/list_emails").json() == {"emails": ["alice@example.com", "alice@work.example"]}

    # Tokens are single use.
    assert _post(verifier, "complete_email_addition", token=add_token).json() == {"success": False}


def test_authenticate_and_logout(app, mailer) -> None:
    c = TestClient(app)
    _post(c, "stage_user", email="bob@example.com", site="rp")
    _post(c, "complete_user_creation", token=mailer.last_token("bob@example.com"), **{"pass": "hunter2hunter2"})
    csrf_before = _csrf(c)

    assert _post(c, "logout").json() == {"success": True}
    assert c.get("/wsapi/session_context").json()["authenticated"] is False
    assert c.get("/wsapi/list_emails").status_code == 400
    # Logging out requires being logged in.
    assert _post(c, "logout").status_code == 400
    # The token survives authentication changes.
    assert _csrf(c) == csrf_before

    assert _post(c, "authenticate_user", email="bob@example.com", **{"pass": "wrong password"}).json() == {
        "success": False
    }
    assert _post(c, "authenticate_user", email="nobody@example.com", **{"pass": "hunter2hunter2"}).json() == {
        "success": False
    }
    assert _post(c, "authenticate_user", email="BOB@example.com", **{"pass": "hunter2hunter2"}).json() == {
        "success": True
    }
    assert c.get("/wsapi/list_emails").json() == {"emails": ["bob@example.com"]}


def test_password_reset_replaces_password(app, mailer) -> None:
    c = TestClient(app)
    _post(c, "stage_user", email="carol@example.com", site="rp")
    _post(c, "complete_user_creation", token=mailer.last_token("carol@example.com"), **{"pass": "first password"})

    _post(c, "stage_user", email="carol@example.com", site="rp")
    # Staging signs the browser out.
    assert c.get("/wsapi/session_context").json()["authenticated"] is False
    _post(c, "complete_user_creation", token=mailer.last_token("carol@example.com"), **{"pass": "second password"})

    _post(c, "logout")
    assert _post(c, "authenticate_user", email="carol@example.com", **{"pass": "first password"}).json() == {
        "success": False
    }
    assert _post(c, "authenticate_user", email="carol@example.com", **{"pass": "second password"}).json() == {
        "success": True
    }


def test_stage_user_rejects_malformed_email(client, mailer) -> None:
    r = _post(client, "stage_user", email="not-an-email", site="rp")
    assert r.status_code == 400
    assert r.json()["success"] is False
    assert mailer.sent == []


def test_read_mode_serves_no_writes(cfg, services) -> None:
    c = TestClient(create_app(replace(cfg, api_mode="read"), services=services))
    assert c.get("/wsapi/have_email", params={"email": "a@example.com"}).status_code == 200
    r = _post(c, "stage_user", email="a@example.com", site="rp")
    assert r.status_code == 400
    assert r.text == "Bad Request"


def test_write_mode_serves_only_writes(cfg, services, mailer) -> None:
    c = TestClient(create_app(replace(cfg, api_mode="write"), services=services))
    # session_context is not served, so no csrf token can be obtained.
    assert c.get("/wsapi/session_context").status_code == 400
    assert c.get("/wsapi/have_email", params={"email": "a@example.com"}).status_code == 400
    assert c.post("/wsapi/stage_user", json={"csrf": "x", "email": "a@example.com", "site": "rp"}).status_code == 400
    assert mailer.sent == []
