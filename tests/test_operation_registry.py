from __future__ import annotations

import logging
import types

import pytest

from idp.wsapi.registry import OperationRegistry, RegistrationError, build_registry


def _handler(method="get", authed=False, writes_db=False, args=None):  # type: ignore[no-untyped-def]
    h = types.SimpleNamespace(method=method, authed=authed, writes_db=writes_db, process=lambda ctx: None)
    if args is not None:
        h.args = args
    return h


def test_default_registry_contains_expected_operations() -> None:
    reg = build_registry("all")
    assert sorted(reg.operations) == [
        "authenticate_user",
        "complete_email_addition",
        "complete_user_creation",
        "email_addition_status",
        "email_for_token",
        "have_email",
        "list_emails",
        "logout",
        "session_context",
        "stage_email",
        "stage_user",
        "user_creation_status",
    ]
    assert reg.operations["logout"].authed is True
    assert reg.operations["stage_user"].writes_db is True
    assert reg.operations["stage_user"].args == ("email", "site")


def test_read_mode_never_registers_db_writers() -> None:
    reg = build_registry("read")
    assert reg.operations
    assert not [op for op in reg.operations.values() if op.writes_db]
    assert "stage_user" not in reg.operations
    assert "session_context" in reg.operations


def test_write_mode_registers_only_db_writers() -> None:
    reg = build_registry("write")
    assert reg.operations
    assert all(op.writes_db for op in reg.operations.values())


def test_resolve_treats_wrong_method_as_not_found() -> None:
    reg = OperationRegistry()
    reg.register("ping", _handler(method="post"))
    assert reg.resolve("/wsapi/ping", "POST") is not None
    assert reg.resolve("/wsapi/ping", "post") is not None
    assert reg.resolve("/wsapi/ping", "GET") is None
    assert reg.resolve("/wsapi/pong", "POST") is None
    assert reg.resolve("/other/ping", "POST") is None
    assert reg.resolve("/wsapi/ping/extra", "POST") is None


@pytest.mark.parametrize("args", ["email", ["email", 3], {"email": True}])
def test_args_must_be_a_list_of_strings(args) -> None:
    with pytest.raises(RegistrationError):
        OperationRegistry().register("bad", _handler(args=args))


def test_registration_rejects_bad_handlers() -> None:
    reg = OperationRegistry()
    with pytest.raises(RegistrationError):
        reg.register("nomethod", _handler(method="put"))
    with pytest.raises(RegistrationError):
        reg.register("noprocess", types.SimpleNamespace(method="get"))
    reg.register("dup", _handler())
    with pytest.raises(RegistrationError):
        reg.register("dup", _handler())


def test_validator_is_derived_from_args() -> None:
    op = OperationRegistry().register("needs", _handler(args=["email", "site"]))
    assert op is not None
    assert op.validate({"email": "a@example.com", "site": "rp"}) is None
    assert op.validate({"email": "a@example.com"}) == "missing 'site' argument"
    assert op.validate({"email": "  ", "site": "rp"}) == "missing 'email' argument"


def test_build_registry_failure_is_fatal(caplog) -> None:
    caplog.set_level(logging.ERROR, logger="idp.wsapi.registry")
    handlers = [("ok", _handler()), ("broken", _handler(args="email"))]
    with pytest.raises(RegistrationError) as exc:
        build_registry("all", handlers=handlers)
    assert "error registering broken api" in str(exc.value)
    assert any("broken" in r.getMessage() for r in caplog.records)


def test_create_app_refuses_to_start_on_bad_registration(cfg, monkeypatch) -> None:
    from idp.api.server import create_app
    from idp.wsapi import handlers

    monkeypatch.setattr(handlers, "DEFAULT_HANDLERS", [("broken", _handler(method="delete"))])
    with pytest.raises(RegistrationError):
        create_app(cfg)
