from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .base import as_text


POSTE_CHOICES: tuple[str, ...] = (
    "Développeur",
    "Chef de projet",
    "Designer",
    "Analyste",
    "Testeur",
    "Administrateur système",
    "Support technique",
)

PROJET_CHOICES: tuple[str, ...] = ("Projet A", "Projet B", "Projet C", "Projet D", "Projet E")


@dataclass
class Personne:
    matricule: str
    nom: str = ""
    prenom: str = ""
    tel: str = ""
    email: str = ""
    poste: str = ""
    projet: str = ""

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "Personne":
        return cls(
            matricule=as_text(payload.get("matricule")),
            nom=as_text(payload.get("nom")),
            prenom=as_text(payload.get("prenom")),
            tel=as_text(payload.get("tel")),
            email=as_text(payload.get("email")),
            poste=as_text(payload.get("poste")),
            projet=as_text(payload.get("projet")),
        )

    @property
    def full_name(self) -> str:
        return f"{self.nom} {self.prenom}".strip()

    def to_payload(self) -> dict[str, str]:
        return {
            "matricule": self.matricule,
            "nom": self.nom,
            "prenom": self.prenom,
            "tel": self.tel,
            "email": self.email,
            "poste": self.poste,
            "projet": self.projet,
        }
