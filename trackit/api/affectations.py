"""Assignments of equipment to a person at a position.

The backend returns explicit error messages for most assignment rules
(equipment already assigned, position occupied...), so these wrappers let the
backend message through and only fall back to a generic one.
"""
from __future__ import annotations

from datetime import date
from typing import Any
from urllib.parse import quote

from ..models import Affectation
from ..models.base import format_date, optional_int
from .client import ApiClient, ApiError, failure_message, to_records


INVALID_SEARCH_MESSAGE = "Paramètres de recherche invalides"


def _failure(message: str):
    return failure_message(message, prefer_backend=True)


def list_affectations(client: ApiClient) -> list[Affectation]:
    with _failure("Erreur lors de la récupération des affectations"):
        return to_records(client.get("/affectations"), Affectation.from_api)


def get_affectation(client: ApiClient, ref_affectation: int) -> Affectation:
    with _failure(f"Erreur lors de la récupération de l'affectation {ref_affectation}"):
        return Affectation.from_api(client.get(f"/affectations/{ref_affectation}") or {})


def create_affectation(client: ApiClient, *, matricule: str, ref_position: str, num_serie: str) -> int | None:
    """Assign ``num_serie`` and return the new assignment reference."""
    payload = {"matricule": matricule, "refPosition": ref_position, "numSerie": num_serie}
    with _failure("Erreur lors de la création de l'affectation"):
        data = client.post("/affectations", payload) or {}
    return optional_int(data.get("refAffectation"))


def update_affectation(
    client: ApiClient,
    ref_affectation: int,
    *,
    matricule: str | None = None,
    ref_position: str | None = None,
) -> None:
    payload = {key: value for key, value in (("matricule", matricule), ("refPosition", ref_position)) if value}
    with _failure(f"Erreur lors de la mise à jour de l'affectation {ref_affectation}"):
        client.put(f"/affectations/{ref_affectation}", payload)


def delete_affectation(client: ApiClient, ref_affectation: int) -> None:
    with _failure(f"Erreur lors de la suppression de l'affectation {ref_affectation}"):
        client.delete(f"/affectations/{ref_affectation}")


def close_affectation(client: ApiClient, ref_affectation: int, num_serie: str) -> None:
    """End an assignment; the backend frees the equipment and the position."""
    with _failure(f"Erreur lors de la clôture de l'affectation {ref_affectation}"):
        client.put(f"/affectations/{ref_affectation}/close", {"idMateriel": num_serie})


def _date_params(start_date: date | str, end_date: date | str) -> dict[str, Any]:
    return {
        "startDate": format_date(start_date) if isinstance(start_date, date) else start_date,
        "endDate": format_date(end_date) if isinstance(end_date, date) else end_date,
    }


def search_by_date_range(client: ApiClient, start_date, end_date) -> list[Affectation]:
    with _failure("Erreur lors de la recherche par plage de dates"):
        data = client.get("/affectations/search/date-range", params=_date_params(start_date, end_date))
    return to_records(data, Affectation.from_api)


def search_by_matricule(client: ApiClient, matricule: str) -> list[Affectation]:
    with _failure("Erreur lors de la recherche par matricule"):
        data = client.get("/affectations/search/matricule", params={"matricule": matricule})
    return to_records(data, Affectation.from_api)


def search_by_position(client: ApiClient, ref_position: str) -> list[Affectation]:
    with _failure("Erreur lors de la recherche par position"):
        data = client.get("/affectations/search/position", params={"refPosition": ref_position})
    return to_records(data, Affectation.from_api)


def search_by_date_and_matricule(client: ApiClient, start_date, end_date, matricule: str) -> list[Affectation]:
    params = {**_date_params(start_date, end_date), "matricule": matricule}
    with _failure("Erreur lors de la recherche combinée par date et matricule"):
        data = client.get("/affectations/search/date-matricule", params=params)
    return to_records(data, Affectation.from_api)


def search_by_date_and_position(client: ApiClient, start_date, end_date, ref_position: str) -> list[Affectation]:
    params = {**_date_params(start_date, end_date), "refPosition": ref_position}
    with _failure("Erreur lors de la recherche combinée par date et position"):
        data = client.get("/affectations/search/date-position", params=params)
    return to_records(data, Affectation.from_api)


def list_by_salle(client: ApiClient, ref_salle: str) -> list[Affectation]:
    with _failure("Erreur lors de la récupération des affectations par salle"):
        return to_records(client.get(f"/affectations/salle/{quote(ref_salle, safe='')}"), Affectation.from_api)


def search_affectations(
    client: ApiClient,
    *,
    start_date=None,
    end_date=None,
    matricule: str | None = None,
    ref_position: str | None = None,
) -> list[Affectation]:
    """Pick the most specific search endpoint for the given criteria.

    A date range only counts when both bounds are given; the matricule wins
    over the position when both are set.
    """

    has_range = bool(start_date) and bool(end_date)
    if has_range and matricule:
        return search_by_date_and_matricule(client, start_date, end_date, matricule)
    if has_range and ref_position:
        return search_by_date_and_position(client, start_date, end_date, ref_position)
    if has_range:
        return search_by_date_range(client, start_date, end_date)
    if matricule:
        return search_by_matricule(client, matricule)
    if ref_position:
        return search_by_position(client, ref_position)
    raise ApiError(INVALID_SEARCH_MESSAGE, kind="validation")
