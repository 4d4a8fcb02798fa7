from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping

from .base import as_text, format_date, nested, optional_text, parse_date


STATUS_DISPONIBLE = "Disponible"
STATUS_AFFECTE = "Affecté"
STATUS_EN_PANNE = "En panne"
STATUS_HORS_SERVICE = "Hors service"

STATUS_CHOICES: tuple[str, ...] = (
    STATUS_DISPONIBLE,
    STATUS_AFFECTE,
    STATUS_EN_PANNE,
    STATUS_HORS_SERVICE,
)

# Categories the backend stores with a row in the ``Ordinateur`` table.
COMPUTER_CATEGORIES: tuple[str, ...] = ("UC", "Laptop", "Ordinateur")

CATEGORY_CHOICES: tuple[str, ...] = ("Ordinateur", "UC", "Laptop", "Imprimante", "Téléphone", "Souris", "Clavier")

UNCATEGORISED_LABEL = "Non catégorisé"


@dataclass
class UniteCentrale:
    nom_pc: str = ""
    systeme_exploitation: str = ""
    ram: str = ""
    disque: str = ""
    processeur: str = ""

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "UniteCentrale | None":
        # The backend either nests the specs under ``uc`` or flattens the
        # LEFT JOIN columns onto the equipment row.
        source = nested(payload, "uc") or payload
        values = {
            "nom_pc": as_text(source.get("nomPC")),
            "systeme_exploitation": as_text(source.get("systemeExploitation")),
            "ram": as_text(source.get("ram")),
            "disque": as_text(source.get("disque")),
            "processeur": as_text(source.get("processeur")),
        }
        if not any(values.values()):
            return None
        return cls(**values)

    def to_payload(self) -> dict[str, str]:
        return {
            "nomPC": self.nom_pc,
            "systemeExploitation": self.systeme_exploitation,
            "ram": self.ram,
            "disque": self.disque,
            "processeur": self.processeur,
        }


@dataclass
class Materiel:
    num_serie: str
    marque: str = ""
    modele: str = ""
    categorie: str = ""
    status: str = STATUS_DISPONIBLE
    date_ajout: date | None = None
    uc: UniteCentrale | None = None
    ref_affectation: str | None = None
    ref_position: str | None = None
    ref_incident: str | None = None

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "Materiel":
        return cls(
            num_serie=as_text(payload.get("numSerie")),
            marque=as_text(payload.get("marque")),
            modele=as_text(payload.get("modele")),
            categorie=as_text(payload.get("categorie")),
            status=as_text(payload.get("status")),
            date_ajout=parse_date(payload.get("dateAjout")),
            uc=UniteCentrale.from_api(payload),
            ref_affectation=optional_text(payload.get("refAffectation")),
            ref_position=optional_text(payload.get("refPosition")),
            ref_incident=optional_text(payload.get("refIncident")),
        )

    @property
    def is_computer(self) -> bool:
        return self.categorie in COMPUTER_CATEGORIES

    @property
    def is_available(self) -> bool:
        return self.status == STATUS_DISPONIBLE

    @property
    def label(self) -> str:
        return f"{self.num_serie} - {self.marque} {self.modele}".strip()

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "numSerie": self.num_serie,
            "marque": self.marque,
            "modele": self.modele,
            "categorie": self.categorie,
            "status": self.status,
            "dateAjout": format_date(self.date_ajout),
        }
        # Computer specs are sent flat, the way the backend reads them.
        if self.uc is not None and self.is_computer:
            payload.update(self.uc.to_payload())
        return payload


@dataclass
class SalleMaterielStat:
    categorie: str
    marque: str
    count: int

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "SalleMaterielStat":
        raw_count = payload.get("count", payload.get("totalMateriels", 0))
        try:
            count = int(raw_count or 0)
        except (TypeError, ValueError):
            count = 0
        return cls(
            categorie=as_text(payload.get("categorie")) or UNCATEGORISED_LABEL,
            marque=as_text(payload.get("marque")),
            count=count,
        )


@dataclass
class BulkResult:
    inserted: int = 0
    skipped: int = 0

    @classmethod
    def from_api(cls, payload: Any) -> "BulkResult":
        if not isinstance(payload, Mapping):
            return cls()
        return cls(
            inserted=int(payload.get("inserted") or 0),
            skipped=int(payload.get("skipped") or 0),
        )
