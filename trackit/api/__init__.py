"""Wrappers around the TrackIT REST backend, one module per resource."""
from __future__ import annotations

from . import (
    affectations,
    auth,
    dashboard,
    incidents,
    inventaires,
    materiels,
    personnes,
    positions,
    salles,
    utilisateurs,
)
from .client import ApiClient, ApiError, error_from_response

__all__ = [
    "ApiClient",
    "ApiError",
    "affectations",
    "auth",
    "dashboard",
    "error_from_response",
    "incidents",
    "inventaires",
    "materiels",
    "personnes",
    "positions",
    "salles",
    "utilisateurs",
]
