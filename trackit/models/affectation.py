from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping

from .base import as_text, optional_int, optional_text, parse_date


@dataclass
class Affectation:
    ref_affectation: int
    date_debut: date | None = None
    date_fin: date | None = None
    matricule: str | None = None
    ref_position: str | None = None
    nom: str = ""
    prenom: str = ""

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "Affectation":
        return cls(
            ref_affectation=optional_int(payload.get("refAffectation")) or 0,
            date_debut=parse_date(payload.get("dateDebut")),
            date_fin=parse_date(payload.get("dateFin")),
            matricule=optional_text(payload.get("matricule")),
            ref_position=optional_text(payload.get("refPosition")),
            nom=as_text(payload.get("nom")),
            prenom=as_text(payload.get("prenom")),
        )

    def is_active(self, today: date | None = None) -> bool:
        """An assignment without end date, or ending in the future, is active."""
        if self.date_fin is None:
            return True
        return self.date_fin > (today or date.today())

    @property
    def person_label(self) -> str:
        return f"{self.nom} {self.prenom}".strip()
