from __future__ import annotations

from datetime import date
from typing import Any, Mapping

from ..models import Incident, count_mapping
from ..models.base import format_date
from .client import ApiClient, failure_message, to_records


def list_incidents(client: ApiClient) -> list[Incident]:
    with failure_message("Échec de la récupération de tous les incidents"):
        return to_records(client.get("/incidents"), Incident.from_api)


def get_incident(client: ApiClient, ref_incident: int) -> Incident:
    with failure_message(f"Échec de la récupération de l'incident avec ref {ref_incident}"):
        return Incident.from_api(client.get(f"/incidents/{ref_incident}") or {})


def create_incident(
    client: ApiClient,
    *,
    type_incident: str,
    date_inc: date,
    ref_inventaire: str | int,
    matricule: str,
    num_serie: str,
    description: str = "",
) -> Any:
    """Report an incident. The backend always opens it as ``Ouvert``."""
    payload = {
        "typeIncident": type_incident,
        "dateInc": format_date(date_inc),
        "refInventaire": ref_inventaire,
        "matricule": matricule,
        "numSerie": num_serie,
        "description": description or None,
    }
    with failure_message("Échec de la création de l'incident"):
        return client.post("/incidents", payload)


def update_incident(client: ApiClient, ref_incident: int, *, statut_incident: str, description: str = "") -> None:
    payload = {"statutIncident": statut_incident, "description": description}
    with failure_message(f"Échec de la mise à jour de l'incident avec ref {ref_incident}"):
        client.put(f"/incidents/{ref_incident}", payload)


def delete_incident(client: ApiClient, ref_incident: int) -> None:
    with failure_message(f"Échec de la suppression de l'incident avec ref {ref_incident}"):
        client.delete(f"/incidents/{ref_incident}")


def filter_incidents(client: ApiClient, filters: Mapping[str, Any]) -> list[Incident]:
    with failure_message("Échec de la filtration des incidents"):
        return to_records(client.get("/incidents/filter", params=filters), Incident.from_api)


def count_incidents(client: ApiClient) -> int:
    with failure_message("Échec de la récupération du nombre total d'incidents"):
        data = client.get("/incidents/stats/total") or {}
    return int(data.get("total") or 0)


def count_by_statut(client: ApiClient) -> dict[str, int]:
    with failure_message("Échec de la récupération du nombre d'incidents par statut"):
        return count_mapping(client.get("/incidents/stats/by-statut"), label_keys=("statutIncident", "statut"))


def count_open_incidents(client: ApiClient) -> int:
    with failure_message("Échec de la récupération du nombre d'incidents ouverts"):
        data = client.get("/incidents/stats/open") or {}
    return int(data.get("total") or 0)
