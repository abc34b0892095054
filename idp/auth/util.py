from __future__ import annotations

import base64
import os
from pathlib import Path


def b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def random_token(nbytes: int = 32) -> str:
    return b64url(os.urandom(nbytes))


def hydrate_secret(name: str, var_path: str) -> str:
    """
    Return the secret stored at `<var_path>/<name>.sekret`, creating it on first use.

    Secrets are generated once per deployment so every process sharing `var_path`
    signs and verifies cookies with the same key.
    """
    path = Path(var_path) / f"{name}.sekret"
    if path.exists():
        secret = path.read_text(encoding="utf-8").strip()
        if secret:
            return secret
    path.parent.mkdir(parents=True, exist_ok=True)
    secret = random_token(48)
    path.write_text(secret, encoding="utf-8")
    try:
        path.chmod(0o600)
    except OSError:
        pass
    return secret
