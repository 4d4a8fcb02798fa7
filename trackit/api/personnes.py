from __future__ import annotations

from typing import IO, Any, Mapping
from urllib.parse import quote

from ..models import Personne
from .client import ApiClient, ApiError, backend_message, failure_message, to_records


def list_personnes(client: ApiClient) -> list[Personne]:
    with failure_message("Échec de la récupération de toutes les personnes"):
        return to_records(client.get("/personnes"), Personne.from_api)


def get_personne(client: ApiClient, matricule: str) -> Personne:
    with failure_message(f"Échec de la récupération de la personne avec matricule {matricule}"):
        return Personne.from_api(client.get(f"/personnes/{quote(matricule, safe='')}") or {})


def create_personne(client: ApiClient, personne: Personne) -> None:
    try:
        client.post("/personnes", personne.to_payload())
    except ApiError as exc:
        # A duplicate matricule comes back as 409 with an explanatory message.
        if exc.status == 409 and exc.detail:
            raise exc.with_message(exc.detail) from exc
        raise exc.with_message("Échec de la création de la personne") from exc


def update_personne(client: ApiClient, matricule: str, personne: Personne) -> None:
    payload = personne.to_payload()
    payload.pop("matricule", None)
    with failure_message(f"Échec de la mise à jour de la personne avec matricule {matricule}"):
        client.put(f"/personnes/{quote(matricule, safe='')}", payload)


def delete_personne(client: ApiClient, matricule: str) -> None:
    with failure_message(f"Échec de la suppression de la personne avec matricule {matricule}"):
        client.delete(f"/personnes/{quote(matricule, safe='')}")


def filter_personnes(client: ApiClient, filters: Mapping[str, Any]) -> list[Personne]:
    with failure_message("Échec du filtrage des personnes"):
        return to_records(client.get("/personnes", params=filters), Personne.from_api)


def import_personnes(client: ApiClient, filename: str, stream: IO[bytes], content_type: str | None = None) -> str:
    """Upload an Excel sheet of staff as the multipart ``file`` field; return the backend's message."""
    files = {"file": (filename, stream, content_type or "application/octet-stream")}
    with failure_message("Erreur lors de l'import", prefer_backend=True):
        data = client.post("/personnes/import", files=files)
    return backend_message(data) or ""
