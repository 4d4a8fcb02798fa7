"""Session state of the signed in user and the route guards built on it."""
from __future__ import annotations

from functools import wraps
from typing import Callable
from urllib.parse import urlsplit

from flask import abort, current_app, g, redirect, request, session, url_for

from .models import AuthenticatedUser
from .models.utilisateur import is_admin_role


USER_KEY = "user"
TOKEN_KEY = "token"

PUBLIC_ENDPOINTS = {"auth.login", "static", "static_without_prefix"}


def login_user(user: AuthenticatedUser, token: str | None = None) -> None:
    session.clear()
    session[USER_KEY] = user.to_session()
    if token:
        session[TOKEN_KEY] = token
    session.permanent = True


def logout_user() -> None:
    session.pop(USER_KEY, None)
    session.pop(TOKEN_KEY, None)
    g.pop("current_user", None)


def current_user() -> AuthenticatedUser | None:
    if "current_user" not in g:
        payload = session.get(USER_KEY)
        g.current_user = AuthenticatedUser.from_session(payload) if isinstance(payload, dict) else None
    return g.current_user


def current_token() -> str | None:
    return session.get(TOKEN_KEY)


def is_authenticated() -> bool:
    return current_user() is not None


def has_role(role: str) -> bool:
    user = current_user()
    if user is None:
        return False
    if role == current_app.config.get("ADMIN_ROLE", "Administrateur"):
        return is_admin_role(user.role)
    return user.role == role


def _login_redirect():
    return redirect(url_for("auth.login", next=request.full_path if request.query_string else request.path))


def admin_required(view: Callable) -> Callable:
    @wraps(view)
    def wrapped(*args, **kwargs):
        if not is_authenticated():
            return _login_redirect()
        if not has_role(current_app.config.get("ADMIN_ROLE", "Administrateur")):
            abort(403)
        return view(*args, **kwargs)

    return wrapped


def guard():
    """``before_request`` hook: every page but the login page needs a session."""
    if request.endpoint is None or request.endpoint in PUBLIC_ENDPOINTS:
        return None
    if not is_authenticated():
        return _login_redirect()
    return None


def safe_next_url(target: str | None) -> str | None:
    """Only follow ``next`` to a path of this application.

    Browsers read ``\\`` as ``/``, so ``/\\host`` is as off-site as ``//host``.
    """
    if not target or "\\" in target:
        return None
    parts = urlsplit(target)
    if parts.scheme or parts.netloc or not target.startswith("/") or target.startswith("//"):
        return None
    return target
