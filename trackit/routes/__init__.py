"""Route blueprints for the TrackIT console."""
from __future__ import annotations

from .affectations import bp as affectations_bp
from .auth import bp as auth_bp
from .incidents import bp as incidents_bp
from .inventaires import bp as inventaires_bp
from .main import bp as main_bp
from .materiels import bp as materiels_bp
from .personnes import bp as personnes_bp
from .positions import bp as positions_bp
from .salles import bp as salles_bp
from .utilisateurs import bp as utilisateurs_bp

BLUEPRINTS = (
    auth_bp,
    main_bp,
    materiels_bp,
    incidents_bp,
    inventaires_bp,
    salles_bp,
    positions_bp,
    affectations_bp,
    personnes_bp,
    utilisateurs_bp,
)

__all__ = [
    "BLUEPRINTS",
    "auth_bp",
    "main_bp",
    "materiels_bp",
    "incidents_bp",
    "inventaires_bp",
    "salles_bp",
    "positions_bp",
    "affectations_bp",
    "personnes_bp",
    "utilisateurs_bp",
]
