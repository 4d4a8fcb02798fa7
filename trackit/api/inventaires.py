from __future__ import annotations

from typing import Any, Mapping
from urllib.parse import quote

from ..models import Inventaire
from ..models.base import optional_int
from .client import ApiClient, failure_message, to_records


def list_inventaires(client: ApiClient) -> list[Inventaire]:
    with failure_message("Échec de la récupération de tous les inventaires"):
        return to_records(client.get("/inventaires"), Inventaire.from_api)


def get_inventaire(client: ApiClient, ref_inventaire: int) -> Inventaire:
    with failure_message(f"Échec de la récupération de l'inventaire avec référence {ref_inventaire}"):
        return Inventaire.from_api(client.get(f"/inventaires/{ref_inventaire}") or {})


def start_inventaire(client: ApiClient, ref_salle: str, observation: str = "") -> int | None:
    """Open a stock-take of ``ref_salle`` and return its reference."""
    payload = {"refSalle": ref_salle, "observation": observation or None}
    with failure_message("Échec du démarrage de l'inventaire"):
        data = client.post("/inventaires/start", payload) or {}
    return optional_int(data.get("refInventaire"))


def validate_inventaire(client: ApiClient, ref_inventaire: int, observation: str | None = None) -> str:
    """Close a stock-take; the backend stamps its end time."""
    payload = {"observation": observation} if observation is not None else {}
    with failure_message(f"Échec de la validation de l'inventaire avec référence {ref_inventaire}"):
        data = client.put(f"/inventaires/{ref_inventaire}/validate", payload) or {}
    return str(data.get("message") or "")


def update_inventaire(
    client: ApiClient,
    ref_inventaire: int,
    *,
    observation: str | None = None,
    ref_salle: str | None = None,
) -> None:
    payload = {key: value for key, value in (("observation", observation), ("refSalle", ref_salle)) if value is not None}
    with failure_message(f"Échec de la mise à jour de l'inventaire avec référence {ref_inventaire}"):
        client.put(f"/inventaires/{ref_inventaire}", payload)


def delete_inventaire(client: ApiClient, ref_inventaire: int) -> None:
    with failure_message(f"Échec de la suppression de l'inventaire avec référence {ref_inventaire}"):
        client.delete(f"/inventaires/{ref_inventaire}")


def filter_inventaires(client: ApiClient, filters: Mapping[str, Any]) -> list[Inventaire]:
    """Server side filtering (``search``, ``dateDebut``, ``dateFin``, ``refSalle``, ``matricule``)."""
    with failure_message("Échec du filtrage des inventaires"):
        return to_records(client.get("/inventaires", params=filters), Inventaire.from_api)


def list_by_salle(client: ApiClient, ref_salle: str) -> list[Inventaire]:
    with failure_message(f"Échec de la récupération des inventaires de la salle {ref_salle}"):
        return to_records(client.get(f"/inventaires/salle/{quote(ref_salle, safe='')}"), Inventaire.from_api)


def list_by_matricule(client: ApiClient, matricule: str) -> list[Inventaire]:
    with failure_message(f"Échec de la récupération des inventaires pour l'utilisateur {matricule}"):
        return to_records(
            client.get("/inventaires/search/matricule", params={"matricule": matricule}),
            Inventaire.from_api,
        )
