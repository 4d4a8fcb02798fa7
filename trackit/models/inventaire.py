from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Mapping

from .base import as_text, nested, optional_int, parse_date, parse_datetime
from .materiel import Materiel


@dataclass
class Inventaire:
    ref_inventaire: int
    date: date | None = None
    debut: datetime | None = None
    fin: datetime | None = None
    observation: str = ""
    ref_salle: str = ""
    matricule: str = ""
    nom_salle: str = ""
    etage: str = ""
    site: str = ""
    personne_nom: str = ""
    personne_prenom: str = ""
    materiels: list[Materiel] = field(default_factory=list)

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "Inventaire":
        salle = nested(payload, "salle")
        personne = nested(payload, "personne")
        return cls(
            ref_inventaire=optional_int(payload.get("refInventaire")) or 0,
            date=parse_date(payload.get("date")),
            debut=parse_datetime(payload.get("debut")),
            fin=parse_datetime(payload.get("fin")),
            observation=as_text(payload.get("observation")),
            ref_salle=as_text(payload.get("refSalle")),
            matricule=as_text(payload.get("matricule")),
            nom_salle=as_text(salle.get("nomSalle", payload.get("nomSalle"))),
            etage=as_text(salle.get("etage")),
            site=as_text(salle.get("site")),
            personne_nom=as_text(personne.get("nom", payload.get("nom"))),
            personne_prenom=as_text(personne.get("prenom", payload.get("prenom"))),
            materiels=[Materiel.from_api(item) for item in payload.get("materiels") or []],
        )

    @property
    def is_validated(self) -> bool:
        return self.fin is not None

    @property
    def responsible(self) -> str:
        full_name = f"{self.personne_nom} {self.personne_prenom}".strip()
        return full_name or self.matricule
