"""Toast notifications, carried across redirects by ``flash``."""
from __future__ import annotations

from dataclasses import dataclass

from flask import current_app, flash, get_flashed_messages

from .api.client import ApiError


SUCCESS = "success"
ERROR = "error"
WARNING = "warning"
INFO = "info"

CATEGORIES = (SUCCESS, ERROR, WARNING, INFO)

# The message is stored as "title|body" so both survive the session round trip.
_SEPARATOR = "|"


@dataclass
class Toast:
    category: str
    title: str
    message: str = ""


def toast(category: str, title: str, message: str = "") -> None:
    if category not in CATEGORIES:
        category = INFO
    flash(f"{title}{_SEPARATOR}{message}" if message else title, category)


def success(title: str, message: str = "") -> None:
    toast(SUCCESS, title, message)


def error(title: str, message: str = "") -> None:
    toast(ERROR, title, message)


def warning(title: str, message: str = "") -> None:
    toast(WARNING, title, message)


def info(title: str, message: str = "") -> None:
    toast(INFO, title, message)


def api_error(title: str, exc: ApiError) -> None:
    """Report a failed API call with one error toast.

    An expired session is not a page level failure: it propagates to the
    application error handler, which signs the user out.
    """

    if exc.is_unauthorized:
        raise exc
    current_app.logger.info("%s: %s", title, exc.message)
    error(title, exc.message)


def pop_toasts() -> list[Toast]:
    toasts = []
    for category, text in get_flashed_messages(with_categories=True):
        title, _, message = text.partition(_SEPARATOR)
        toasts.append(Toast(category=category if category in CATEGORIES else INFO, title=title, message=message))
    return toasts
