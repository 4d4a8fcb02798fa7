"""Client side filter, sort and pagination of the lists fetched from the API.

Every list page runs the records it fetched through the same pipeline:
``filter -> sort -> paginate``. What a page can search and filter on is
declared once with a :class:`Listing`.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from math import ceil
from typing import Any, Callable, Generic, Iterable, Mapping, Sequence, TypeVar

from .models.base import parse_date


T = TypeVar("T")

ASCENDING = "asc"
DESCENDING = "desc"
DEFAULT_PER_PAGE = 10


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def contains(value: Any, needle: str | None) -> bool:
    """Case insensitive substring test; an empty needle matches everything."""
    if not needle:
        return True
    return needle.strip().lower() in _text(value).lower()


def equals(value: Any, expected: str | None) -> bool:
    if not expected:
        return True
    return _text(value) == expected


def in_date_range(value: date | datetime | None, start: date | None, end: date | None) -> bool:
    """Inclusive range test. Either bound may be open; undated records fail a bounded range."""
    if start is None and end is None:
        return True
    if value is None:
        return False
    if isinstance(value, datetime):
        value = value.date()
    if start is not None and value < start:
        return False
    if end is not None and value > end:
        return False
    return True


def _sort_key(value: Any) -> tuple:
    if isinstance(value, bool):
        value = int(value)
    if isinstance(value, (int, float)):
        return (0, value, "")
    return (1, 0, _text(value).lower())


@dataclass(frozen=True)
class SortConfig:
    key: str | None = None
    direction: str = ASCENDING

    @property
    def descending(self) -> bool:
        return self.direction == DESCENDING

    def toggle(self, key: str) -> "SortConfig":
        """Clicking the active column while ascending flips it, anything else sorts ascending."""
        if self.key == key and self.direction == ASCENDING:
            return SortConfig(key, DESCENDING)
        return SortConfig(key, ASCENDING)

    def apply(self, items: Iterable[T]) -> list[T]:
        items = list(items)
        if not self.key:
            return items
        return sorted(items, key=lambda item: _sort_key(getattr(item, self.key, None)), reverse=self.descending)


@dataclass
class Page(Generic[T]):
    items: list[T]
    page: int
    per_page: int
    total: int
    pages: int

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.pages

    @property
    def prev_num(self) -> int | None:
        return self.page - 1 if self.has_prev else None

    @property
    def next_num(self) -> int | None:
        return self.page + 1 if self.has_next else None

    @property
    def first_index(self) -> int:
        """1-based position of the first row shown, 0 for an empty page."""
        if not self.items:
            return 0
        return (self.page - 1) * self.per_page + 1

    @property
    def last_index(self) -> int:
        if not self.items:
            return 0
        return self.first_index + len(self.items) - 1

    def iter_pages(self) -> range:
        return range(1, self.pages + 1)


def paginate(items: Sequence[T], page: int = 1, per_page: int = DEFAULT_PER_PAGE) -> Page[T]:
    per_page = max(1, int(per_page))
    total = len(items)
    pages = ceil(total / per_page) if total else 0
    page = min(max(1, int(page)), max(pages, 1))
    start = (page - 1) * per_page
    return Page(items=list(items[start:start + per_page]), page=page, per_page=per_page, total=total, pages=pages)


def _positive_int(value: Any, default: int = 1) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


@dataclass
class ListQuery:
    """State of a list page as carried by its query string."""

    search: str = ""
    date_from: date | None = None
    date_to: date | None = None
    filters: dict[str, str] = field(default_factory=dict)
    sort: SortConfig = field(default_factory=SortConfig)
    page: int = 1

    @classmethod
    def from_args(
        cls,
        args: Mapping[str, Any],
        filter_fields: Iterable[str] = (),
        default_sort: str | None = None,
    ) -> "ListQuery":
        direction = args.get("dir") or ASCENDING
        if direction not in (ASCENDING, DESCENDING):
            direction = ASCENDING
        filters = {name: (args.get(name) or "").strip() for name in filter_fields}
        return cls(
            search=(args.get("q") or "").strip(),
            date_from=parse_date(args.get("date_from")),
            date_to=parse_date(args.get("date_to")),
            filters={name: value for name, value in filters.items() if value},
            sort=SortConfig(args.get("sort") or default_sort, direction),
            page=_positive_int(args.get("page")),
        )

    @property
    def is_filtered(self) -> bool:
        return bool(self.search or self.date_from or self.date_to or self.filters)

    def to_args(self, **overrides: Any) -> dict[str, Any]:
        """Query string arguments reproducing this state, for ``url_for``."""
        args: dict[str, Any] = {
            "q": self.search,
            "date_from": self.date_from.isoformat() if self.date_from else None,
            "date_to": self.date_to.isoformat() if self.date_to else None,
            "sort": self.sort.key,
            "dir": self.sort.direction if self.sort.key else None,
            "page": self.page if self.page > 1 else None,
            **self.filters,
        }
        args.update(overrides)
        return {key: value for key, value in args.items() if value not in (None, "")}

    def sort_args(self, key: str) -> dict[str, Any]:
        """Arguments of a column header link; sorting again goes back to page 1."""
        toggled = self.sort.toggle(key)
        return self.to_args(sort=toggled.key, dir=toggled.direction, page=None)

    def page_args(self, page: int) -> dict[str, Any]:
        return self.to_args(page=page)

    def with_page(self, page: int) -> "ListQuery":
        return replace(self, page=page)


@dataclass(frozen=True)
class Listing:
    """What a list page searches, filters and sorts on.

    ``search_fields`` are matched by the free text search, ``date_field`` by the
    date range, ``contains_filters`` by substring and ``exact_filters`` by
    equality (select boxes).
    """

    search_fields: tuple[str, ...]
    date_field: str | None = None
    contains_filters: tuple[str, ...] = ()
    exact_filters: tuple[str, ...] = ()
    default_sort: str | None = None

    @property
    def filter_fields(self) -> tuple[str, ...]:
        return self.contains_filters + self.exact_filters

    def query(self, args: Mapping[str, Any]) -> ListQuery:
        return ListQuery.from_args(args, self.filter_fields, self.default_sort)

    def matches(self, item: Any, query: ListQuery) -> bool:
        if query.search and not any(contains(getattr(item, name, None), query.search) for name in self.search_fields):
            return False
        if self.date_field and not in_date_range(getattr(item, self.date_field, None), query.date_from, query.date_to):
            return False
        for name in self.contains_filters:
            if not contains(getattr(item, name, None), query.filters.get(name)):
                return False
        for name in self.exact_filters:
            if not equals(getattr(item, name, None), query.filters.get(name)):
                return False
        return True

    def filter(self, items: Iterable[T], query: ListQuery) -> list[T]:
        return [item for item in items if self.matches(item, query)]

    def run(self, items: Iterable[T], query: ListQuery, per_page: int = DEFAULT_PER_PAGE) -> Page[T]:
        return paginate(query.sort.apply(self.filter(items, query)), query.page, per_page)


MATERIELS = Listing(
    search_fields=("num_serie", "date_ajout"),
    date_field="date_ajout",
    contains_filters=("marque", "modele", "categorie", "status"),
)

INCIDENTS = Listing(
    search_fields=("ref_incident", "ref_inventaire", "num_serie", "date_inc"),
    date_field="date_inc",
    contains_filters=("ref_incident", "ref_inventaire", "num_serie", "type_incident", "statut_incident", "matricule"),
)

AFFECTATIONS = Listing(
    search_fields=("ref_affectation", "matricule", "ref_position", "nom", "prenom"),
    date_field="date_debut",
    contains_filters=("ref_affectation", "ref_position", "matricule"),
)

INVENTAIRES = Listing(
    search_fields=("ref_inventaire", "ref_salle", "nom_salle", "matricule"),
    date_field="date",
    contains_filters=("ref_salle", "matricule"),
)

PERSONNES = Listing(
    search_fields=("matricule", "nom", "prenom", "email"),
    exact_filters=("poste", "projet"),
    default_sort="matricule",
)

POSITIONS = Listing(
    search_fields=("ref_position", "design_position", "port"),
    exact_filters=("occupation", "ref_salle"),
    default_sort="ref_position",
)

SALLES = Listing(
    search_fields=("ref_salle", "nom_salle"),
    exact_filters=("etage",),
)

UTILISATEURS = Listing(
    search_fields=("matricule", "nom", "prenom", "nom_user", "email"),
    contains_filters=("role",),
)


def count_by(items: Iterable[Any], attribute: str | Callable[[Any], Any]) -> dict[str, int]:
    getter = attribute if callable(attribute) else (lambda item: getattr(item, attribute, None))
    counts: dict[str, int] = {}
    for item in items:
        label = _text(getter(item))
        counts[label] = counts.get(label, 0) + 1
    return counts


def unique_values(items: Iterable[Any], attribute: str) -> list[str]:
    """Distinct non empty values, sorted, to feed a filter select box."""
    return sorted({_text(getattr(item, attribute, None)) for item in items} - {""}, key=str.lower)


def group_by(items: Iterable[T], attribute: str) -> dict[str, list[T]]:
    groups: dict[str, list[T]] = defaultdict(list)
    for item in items:
        groups[_text(getattr(item, attribute, None))].append(item)
    return dict(sorted(groups.items(), key=lambda entry: entry[0].lower()))


def split_active(affectations: Iterable[Any], today: date | None = None) -> tuple[list[Any], list[Any]]:
    """Split assignments into ``(active, closed)``."""
    active: list[Any] = []
    closed: list[Any] = []
    for affectation in affectations:
        (active if affectation.is_active(today) else closed).append(affectation)
    return active, closed


def occupancy(positions: Iterable[Any]) -> tuple[int, int]:
    """Return ``(free, occupied)`` position counts."""
    free = occupied = 0
    for position in positions:
        if position.is_occupied:
            occupied += 1
        else:
            free += 1
    return free, occupied
