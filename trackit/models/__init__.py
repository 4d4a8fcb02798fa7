"""Records exchanged with the TrackIT REST backend."""
from __future__ import annotations

from .affectation import Affectation
from .dashboard import DashboardStats, MonthlyEvolution, RecentOperation, count_mapping
from .incident import Incident
from .inventaire import Inventaire
from .materiel import BulkResult, Materiel, SalleMaterielStat, UniteCentrale
from .personne import Personne
from .position import Position
from .salle import Salle
from .utilisateur import AuthenticatedUser, Utilisateur, is_admin_role

__all__ = [
    "Affectation",
    "AuthenticatedUser",
    "BulkResult",
    "DashboardStats",
    "Incident",
    "Inventaire",
    "Materiel",
    "MonthlyEvolution",
    "Personne",
    "Position",
    "RecentOperation",
    "Salle",
    "SalleMaterielStat",
    "UniteCentrale",
    "Utilisateur",
    "count_mapping",
    "is_admin_role",
]
