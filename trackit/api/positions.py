from __future__ import annotations

from typing import Any, Mapping
from urllib.parse import quote

from ..models import Position
from .client import ApiClient, failure_message, to_records


def list_positions(client: ApiClient) -> list[Position]:
    with failure_message("Échec de la récupération de toutes les positions"):
        return to_records(client.get("/positions"), Position.from_api)


def get_position(client: ApiClient, ref_position: str) -> Position:
    with failure_message(f"Échec de la récupération de la position avec refPosition {ref_position}"):
        return Position.from_api(client.get(f"/positions/{quote(ref_position, safe='')}") or {})


def create_position(client: ApiClient, position: Position) -> None:
    with failure_message("Échec de la création de la position"):
        client.post("/positions", position.to_payload())


def update_position(client: ApiClient, ref_position: str, position: Position) -> None:
    with failure_message(f"Échec de la mise à jour de la position avec refPosition {ref_position}"):
        client.put(f"/positions/{quote(ref_position, safe='')}", position.to_payload())


def delete_position(client: ApiClient, ref_position: str) -> None:
    with failure_message(f"Échec de la suppression de la position avec refPosition {ref_position}"):
        client.delete(f"/positions/{quote(ref_position, safe='')}")


def filter_positions(client: ApiClient, filters: Mapping[str, Any]) -> list[Position]:
    with failure_message("Échec du filtrage des positions"):
        return to_records(client.get("/positions", params=filters), Position.from_api)
