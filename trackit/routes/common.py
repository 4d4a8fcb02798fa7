"""Helpers shared by the page blueprints."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from flask import current_app, request

from .. import notifications
from ..api.client import ApiClient, ApiError
from ..extensions import api
from ..listing import Listing, ListQuery, Page

T = TypeVar("T")

MODALS = {"add", "edit", "view", "delete", "bulk", "assign", "close", "barcode", "validate", "start"}


def client() -> ApiClient:
    return api.client


def per_page() -> int:
    return int(current_app.config.get("ITEMS_PER_PAGE", 10))


def requested_modal(allowed: set[str] | None = None) -> str | None:
    modal = request.args.get("modal")
    if modal not in (allowed or MODALS):
        return None
    return modal


@dataclass
class Fetched(Generic[T]):
    """Result of loading a page's data; ``error`` is set when the call failed."""

    data: T
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


def fetch(title: str, loader: Callable[[], T], default: T) -> Fetched[T]:
    try:
        return Fetched(loader())
    except ApiError as exc:
        notifications.api_error(title, exc)
        return Fetched(default, exc.message)


def attempt(title: str, action: Callable[[], Any]) -> tuple[bool, Any]:
    """Run a mutation; on failure flash one error toast and report ``False``."""
    try:
        return True, action()
    except ApiError as exc:
        notifications.api_error(title, exc)
        return False, None


@dataclass
class ListView(Generic[T]):
    """Everything a list template needs about the table it renders."""

    query: ListQuery
    page: Page[T]
    error: str | None = None


def build_list(listing: Listing, items: list[T], error: str | None = None) -> ListView[T]:
    query = listing.query(request.args)
    return ListView(query=query, page=listing.run(items, query, per_page()), error=error)


def find(items: list[T], attribute: str, value: Any) -> T | None:
    if value in (None, ""):
        return None
    return next((item for item in items if str(getattr(item, attribute)) == str(value)), None)


def choices(items, value: Callable[[Any], str], label: Callable[[Any], str], placeholder: str) -> list[tuple[str, str]]:
    return [("", placeholder)] + [(value(item), label(item)) for item in items]
