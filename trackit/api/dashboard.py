from __future__ import annotations

from ..models import DashboardStats, MonthlyEvolution, RecentOperation
from .client import ApiClient, failure_message, to_records


def get_stats(client: ApiClient) -> DashboardStats:
    with failure_message("Échec de la récupération des statistiques du tableau de bord"):
        return DashboardStats.from_api(client.get("/dashboard/stats") or {})


def get_recent_operations(client: ApiClient) -> list[RecentOperation]:
    with failure_message("Échec de la récupération des opérations récentes"):
        return to_records(client.get("/dashboard/recent-operations"), RecentOperation.from_api)


def get_monthly_evolution(client: ApiClient) -> list[MonthlyEvolution]:
    with failure_message("Échec de la récupération de l'évolution mensuelle"):
        return to_records(client.get("/dashboard/monthly-evolution"), MonthlyEvolution.from_api)
