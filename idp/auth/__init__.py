"""
Session, CSRF and authentication helpers for the wsapi.

Design goals:
- Cookie-backed session state (signed, HttpOnly), scoped to /wsapi.
- One CSRF token per session; it survives sign-in and sign-out.
- Authentication expiry is evaluated lazily, at read time.
"""
