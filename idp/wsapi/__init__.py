"""
Web services API (wsapi): the operations served under /wsapi/.

Each handler module exposes:
- process(ctx) -> Response: handle the call
- method: "get" or "post"
- authed: whether the caller must hold an authenticated session
- writes_db: whether processing writes account storage
- args: optional list of required argument names
"""
