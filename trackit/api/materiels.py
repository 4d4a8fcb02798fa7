from __future__ import annotations

from typing import Any, Iterable, Mapping
from urllib.parse import quote

from ..models import BulkResult, Materiel, count_mapping
from .client import ApiClient, failure_message, to_records


def list_materiels(client: ApiClient) -> list[Materiel]:
    with failure_message("Échec de la récupération de tous les matériels"):
        return to_records(client.get("/materiels"), Materiel.from_api)


def get_materiel(client: ApiClient, num_serie: str) -> Materiel:
    with failure_message(f"Échec de la récupération du matériel avec numSerie {num_serie}"):
        return Materiel.from_api(client.get(f"/materiels/{quote(num_serie, safe='')}") or {})


def create_materiel(client: ApiClient, materiel: Materiel) -> None:
    with failure_message("Échec de la création du matériel"):
        client.post("/materiels", materiel.to_payload())


def bulk_add_materiels(client: ApiClient, materiels: Iterable[Materiel]) -> BulkResult:
    payload = [materiel.to_payload() for materiel in materiels]
    with failure_message("Échec de l'ajout en bulk des matériels"):
        return BulkResult.from_api(client.post("/materiels/bulk", payload))


def update_materiel(client: ApiClient, num_serie: str, materiel: Materiel) -> None:
    with failure_message(f"Échec de la mise à jour du matériel avec numSerie {num_serie}"):
        client.put(f"/materiels/{quote(num_serie, safe='')}", materiel.to_payload())


def delete_materiel(client: ApiClient, num_serie: str) -> None:
    with failure_message(f"Échec de la suppression du matériel avec numSerie {num_serie}"):
        client.delete(f"/materiels/{quote(num_serie, safe='')}")


def filter_materiels(client: ApiClient, filters: Mapping[str, Any]) -> list[Materiel]:
    """Server side filtering on marque, modele, categorie, status and dateAjout."""
    with failure_message("Échec de la filtration des matériels"):
        return to_records(client.get("/materiels/filter", params=filters), Materiel.from_api)


def get_materiel_by_barcode(client: ApiClient, barcode: str) -> Materiel:
    with failure_message(f"Échec de la récupération du matériel avec code-barres {barcode}"):
        return Materiel.from_api(client.get(f"/materiels/barcode/{quote(barcode, safe='')}") or {})


def generate_barcode(client: ApiClient, num_serie: str) -> str:
    """Return the barcode image of an item as a ``data:`` URI."""
    with failure_message(f"Échec de la génération du code-barres pour numSerie {num_serie}"):
        data = client.get(f"/materiels/generate-barcode/{quote(num_serie, safe='')}") or {}
    return str(data.get("barcode") or "")


def count_materiels(client: ApiClient) -> int:
    with failure_message("Échec de la récupération du nombre total de matériels"):
        data = client.get("/materiels/count") or {}
    return int(data.get("total") or 0)


def count_by_statut(client: ApiClient) -> dict[str, int]:
    with failure_message("Échec de la récupération du nombre de matériels par statut"):
        return count_mapping(client.get("/materiels/count/statut"), label_keys=("statut", "status"))


def count_by_categorie(client: ApiClient) -> dict[str, int]:
    with failure_message("Échec de la récupération du nombre de matériels par catégorie"):
        return count_mapping(client.get("/materiels/count/category"), label_keys=("categorie",))


def count_by_salle_categorie_marque(client: ApiClient) -> dict[str, int]:
    with failure_message("Échec de la récupération du nombre de matériels par marque"):
        return count_mapping(
            client.get("/materiels/count/marque"),
            label_keys=("marque",),
            count_keys=("count", "totalMateriels"),
        )
