from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Mapping

from .base import as_text


ROLE_ADMINISTRATEUR = "Administrateur"
ROLE_RESPONSABLE = "Responsable"
ROLE_CHOICES: tuple[str, ...] = (ROLE_RESPONSABLE, ROLE_ADMINISTRATEUR)


@dataclass
class Utilisateur:
    """System account linked to a ``Personne`` through its matricule.

    The password hash never leaves the backend, so it is not part of the
    record; it is only ever sent on creation or update.
    """

    matricule: str
    nom_user: str = ""
    role: str = ROLE_RESPONSABLE
    nom: str = ""
    prenom: str = ""
    email: str = ""
    poste: str = ""
    projet: str = ""
    is_active: bool = True

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "Utilisateur":
        return cls(
            matricule=as_text(payload.get("matricule")),
            nom_user=as_text(payload.get("nomUser")),
            role=as_text(payload.get("role")),
            nom=as_text(payload.get("nom")),
            prenom=as_text(payload.get("prenom")),
            email=as_text(payload.get("email")),
            poste=as_text(payload.get("poste")),
            projet=as_text(payload.get("projet")),
            is_active=bool(payload.get("isActive", True)),
        )

    @property
    def is_admin(self) -> bool:
        return is_admin_role(self.role)


@dataclass
class AuthenticatedUser:
    """User record kept in the session after a successful login."""

    matricule: str
    nom_user: str
    role: str
    nom: str = ""
    prenom: str = ""
    email: str = ""

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "AuthenticatedUser":
        return cls(
            matricule=as_text(payload.get("matricule")),
            nom_user=as_text(payload.get("nomUser")),
            role=as_text(payload.get("role")),
            nom=as_text(payload.get("nom")),
            prenom=as_text(payload.get("prenom")),
            email=as_text(payload.get("email")),
        )

    @classmethod
    def from_session(cls, payload: Mapping[str, Any]) -> "AuthenticatedUser":
        return cls(**{key: as_text(payload.get(key)) for key in cls.__dataclass_fields__})

    def to_session(self) -> dict[str, str]:
        return asdict(self)

    @property
    def is_admin(self) -> bool:
        return is_admin_role(self.role)

    @property
    def display_name(self) -> str:
        full_name = f"{self.prenom} {self.nom}".strip()
        return full_name or self.nom_user


def is_admin_role(role: str | None) -> bool:
    return (role or "").strip().lower() in {"administrateur", "admin"}
