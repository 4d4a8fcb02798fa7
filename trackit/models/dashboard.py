from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Mapping

from .base import as_text, parse_date


OPERATION_TYPE_LABELS = {
    "affectation": "Affectation",
    "incident": "Incident",
    "inventaire": "Inventaire",
    "ajout-materiel": "Ajout de matériel",
}


def _as_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def count_mapping(
    payload: Any,
    label_keys: Iterable[str] = ("statut", "categorie"),
    count_keys: Iterable[str] = ("count",),
) -> dict[str, int]:
    """Normalise the count endpoints into ``{label: count}``.

    Depending on the route the backend answers either with a ready mapping or
    with the raw ``GROUP BY`` rows (``[{"statut": "Disponible", "count": 3}]``).
    Rows sharing a label are summed.
    """

    if isinstance(payload, Mapping):
        return {str(key): _as_int(value) for key, value in payload.items()}
    counts: dict[str, int] = {}
    label_keys = tuple(label_keys)
    count_keys = tuple(count_keys)
    if not isinstance(payload, list):
        return counts
    for row in payload:
        if not isinstance(row, Mapping):
            continue
        label = next((row[key] for key in label_keys if row.get(key) is not None), None)
        if label is None:
            continue
        count = next((row[key] for key in count_keys if row.get(key) is not None), 0)
        counts[str(label)] = counts.get(str(label), 0) + _as_int(count)
    return counts


@dataclass
class DashboardStats:
    total_materiels: int = 0
    materiels_by_status: dict[str, int] = field(default_factory=dict)
    materiels_by_category: dict[str, int] = field(default_factory=dict)
    total_incidents: int = 0
    open_incidents: int = 0
    total_inventaires: int = 0
    recent_inventaires: int = 0
    total_affectations: int = 0
    recent_affectations: int = 0

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "DashboardStats":
        return cls(
            total_materiels=_as_int(payload.get("totalMateriels")),
            materiels_by_status=count_mapping(payload.get("materielsByStatus") or {}),
            materiels_by_category=count_mapping(payload.get("materielsByCategory") or {}),
            total_incidents=_as_int(payload.get("totalIncidents")),
            open_incidents=_as_int(payload.get("openIncidents")),
            total_inventaires=_as_int(payload.get("totalInventaires")),
            recent_inventaires=_as_int(payload.get("recentInventaires")),
            total_affectations=_as_int(payload.get("totalAffectations")),
            recent_affectations=_as_int(payload.get("recentAffectations")),
        )


@dataclass
class RecentOperation:
    id: str
    type: str
    description: str
    date: date | None
    status: str

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "RecentOperation":
        return cls(
            id=as_text(payload.get("id")),
            type=as_text(payload.get("type")),
            description=as_text(payload.get("description")),
            date=parse_date(payload.get("date")),
            status=as_text(payload.get("status")),
        )

    @property
    def type_label(self) -> str:
        return OPERATION_TYPE_LABELS.get(self.type, self.type)


@dataclass
class MonthlyEvolution:
    month: str
    affectations: int = 0
    incidents: int = 0
    inventaires: int = 0
    materiels: int = 0

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "MonthlyEvolution":
        return cls(
            month=as_text(payload.get("month")),
            affectations=_as_int(payload.get("affectations")),
            incidents=_as_int(payload.get("incidents")),
            inventaires=_as_int(payload.get("inventaires")),
            materiels=_as_int(payload.get("materiels")),
        )

    @property
    def total(self) -> int:
        return self.affectations + self.incidents + self.inventaires + self.materiels
