from __future__ import annotations

from typing import Any, Mapping
from urllib.parse import quote

from ..models import Salle, SalleMaterielStat
from .client import ApiClient, failure_message, to_records


def list_salles(client: ApiClient) -> list[Salle]:
    with failure_message("Échec de la récupération de toutes les salles"):
        return to_records(client.get("/salles"), Salle.from_api)


def get_salle(client: ApiClient, ref_salle: str) -> Salle:
    with failure_message(f"Échec de la récupération de la salle avec refSalle {ref_salle}"):
        return Salle.from_api(client.get(f"/salles/{quote(ref_salle, safe='')}") or {})


def create_salle(client: ApiClient, salle: Salle) -> None:
    with failure_message("Échec de la création de la salle"):
        client.post("/salles", salle.to_payload())


def update_salle(client: ApiClient, ref_salle: str, salle: Salle) -> None:
    with failure_message(f"Échec de la mise à jour de la salle avec refSalle {ref_salle}"):
        client.put(f"/salles/{quote(ref_salle, safe='')}", salle.to_payload())


def delete_salle(client: ApiClient, ref_salle: str) -> None:
    with failure_message(f"Échec de la suppression de la salle avec refSalle {ref_salle}"):
        client.delete(f"/salles/{quote(ref_salle, safe='')}")


def filter_salles(client: ApiClient, filters: Mapping[str, Any]) -> list[Salle]:
    with failure_message("Échec du filtrage des salles"):
        return to_records(client.get("/salles", params=filters), Salle.from_api)


def materiels_stats(client: ApiClient, ref_salle: str) -> list[SalleMaterielStat]:
    """Equipment installed in a room, counted by category and brand."""
    with failure_message("Échec de la récupération des statistiques de matériels par salle"):
        return to_records(
            client.get(f"/salles/{quote(ref_salle, safe='')}/materiels-stats"),
            SalleMaterielStat.from_api,
        )
