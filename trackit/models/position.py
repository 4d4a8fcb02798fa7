from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .base import as_text, optional_text


OCCUPATION_LIBRE = "Libre"
OCCUPATION_OCCUPEE = "Occupée"
OCCUPATION_CHOICES: tuple[str, ...] = (OCCUPATION_LIBRE, OCCUPATION_OCCUPEE)


@dataclass
class Position:
    ref_position: str
    design_position: str = ""
    port: str = ""
    occupation: str = OCCUPATION_LIBRE
    ref_salle: str = ""
    nom_salle: str | None = None

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "Position":
        return cls(
            ref_position=as_text(payload.get("refPosition")),
            design_position=as_text(payload.get("designPosition")),
            port=as_text(payload.get("port")),
            occupation=as_text(payload.get("occupation")) or OCCUPATION_LIBRE,
            ref_salle=as_text(payload.get("refSalle")),
            nom_salle=optional_text(payload.get("nomSalle")),
        )

    @property
    def is_occupied(self) -> bool:
        return self.occupation == OCCUPATION_OCCUPEE

    def to_payload(self) -> dict[str, str]:
        return {
            "refPosition": self.ref_position,
            "designPosition": self.design_position,
            "port": self.port,
            "occupation": self.occupation,
            "refSalle": self.ref_salle,
        }
