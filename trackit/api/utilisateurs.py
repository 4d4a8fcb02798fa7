from __future__ import annotations

from typing import Any, Mapping
from urllib.parse import quote

from ..models import Utilisateur
from .client import ApiClient, failure_message, to_records


SERVER_UNREACHABLE_MESSAGE = "Impossible de se connecter au serveur. Vérifiez votre connexion internet."


def _failure(message: str):
    return failure_message(message, network_message=SERVER_UNREACHABLE_MESSAGE)


def list_utilisateurs(client: ApiClient) -> list[Utilisateur]:
    with _failure("Échec de la récupération de tous les utilisateurs"):
        return to_records(client.get("/utilisateurs"), Utilisateur.from_api)


def get_utilisateur(client: ApiClient, matricule: str) -> Utilisateur:
    with _failure(f"Échec de la récupération de l'utilisateur avec matricule {matricule}"):
        return Utilisateur.from_api(client.get(f"/utilisateurs/{quote(matricule, safe='')}") or {})


def create_utilisateur(client: ApiClient, *, matricule: str, nom_user: str, password: str, role: str) -> None:
    payload = {"matricule": matricule, "nomUser": nom_user, "motDePasse": password, "role": role}
    with _failure("Échec de la création de l'utilisateur"):
        client.post("/utilisateurs", payload)


def update_utilisateur(
    client: ApiClient,
    matricule: str,
    *,
    nom_user: str | None = None,
    role: str | None = None,
    password: str | None = None,
) -> None:
    """Only the given fields are sent; an empty password keeps the current one."""
    payload: dict[str, Any] = {}
    if nom_user is not None:
        payload["nomUser"] = nom_user
    if role is not None:
        payload["role"] = role
    if password:
        payload["motDePasse"] = password
    with _failure(f"Échec de la mise à jour de l'utilisateur avec matricule {matricule}"):
        client.put(f"/utilisateurs/{quote(matricule, safe='')}", payload)


def delete_utilisateur(client: ApiClient, matricule: str) -> None:
    with _failure(f"Échec de la suppression de l'utilisateur avec matricule {matricule}"):
        client.delete(f"/utilisateurs/{quote(matricule, safe='')}")


def filter_utilisateurs(client: ApiClient, filters: Mapping[str, Any]) -> list[Utilisateur]:
    with _failure("Échec du filtrage des utilisateurs"):
        return to_records(client.get("/utilisateurs", params=filters), Utilisateur.from_api)
