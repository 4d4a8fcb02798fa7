from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .base import as_text


@dataclass
class Salle:
    ref_salle: str
    nom_salle: str = ""
    etage: str = ""
    site: str = ""
    nombre_positions: int = 0

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "Salle":
        return cls(
            ref_salle=as_text(payload.get("refSalle")),
            nom_salle=as_text(payload.get("nomSalle")),
            etage=as_text(payload.get("etage")),
            site=as_text(payload.get("site")),
        )

    def to_payload(self) -> dict[str, str]:
        return {
            "refSalle": self.ref_salle,
            "nomSalle": self.nom_salle,
            "etage": self.etage,
            "site": self.site,
        }

    def __str__(self) -> str:
        return f"{self.ref_salle} - {self.nom_salle}" if self.nom_salle else self.ref_salle
