from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping

from .base import as_text, nested, optional_int, optional_text, parse_date


STATUT_OUVERT = "Ouvert"
STATUT_EN_COURS = "En cours"
STATUT_RESOLU = "Résolu"
STATUT_FERME = "Fermé"
STATUT_CHOICES: tuple[str, ...] = (STATUT_OUVERT, STATUT_EN_COURS, STATUT_RESOLU, STATUT_FERME)

TYPE_CHOICES: tuple[str, ...] = ("Panne matériel", "Panne logicielle", "Vol", "Perte", "Dégât", "Autre")


@dataclass
class Incident:
    ref_incident: int
    type_incident: str = ""
    statut_incident: str = STATUT_OUVERT
    description: str = ""
    date_inc: date | None = None
    ref_inventaire: str | None = None
    matricule: str = ""
    num_serie: str = ""
    personne_nom: str = ""
    personne_prenom: str = ""
    materiel_marque: str = ""
    materiel_modele: str = ""
    date_inventaire: date | None = None

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "Incident":
        personne = nested(payload, "personne")
        materiel = nested(payload, "materiel")
        inventaire = nested(payload, "inventaire")
        return cls(
            ref_incident=optional_int(payload.get("refIncident")) or 0,
            type_incident=as_text(payload.get("typeIncident")),
            statut_incident=as_text(payload.get("statutIncident")),
            description=as_text(payload.get("description")),
            date_inc=parse_date(payload.get("dateInc")),
            ref_inventaire=optional_text(payload.get("refInventaire")),
            matricule=as_text(payload.get("matricule")),
            num_serie=as_text(payload.get("numSerie")),
            personne_nom=as_text(personne.get("nom", payload.get("nom"))),
            personne_prenom=as_text(personne.get("prenom", payload.get("prenom"))),
            materiel_marque=as_text(materiel.get("marque", payload.get("marque"))),
            materiel_modele=as_text(materiel.get("modele", payload.get("modele"))),
            date_inventaire=parse_date(inventaire.get("date", payload.get("dateInventaire"))),
        )

    @property
    def is_open(self) -> bool:
        return self.statut_incident == STATUT_OUVERT

    @property
    def reporter(self) -> str:
        return f"{self.personne_nom} {self.personne_prenom}".strip()

    @property
    def equipment_label(self) -> str:
        return f"{self.materiel_marque} {self.materiel_modele}".strip()
