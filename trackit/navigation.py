"""Sidebar entries and their visibility per role."""
from __future__ import annotations

from dataclasses import dataclass

from flask import request, url_for

from .models import AuthenticatedUser


@dataclass(frozen=True)
class NavItem:
    label: str
    endpoint: str
    icon: str
    admin_only: bool = False

    @property
    def url(self) -> str:
        return url_for(self.endpoint)

    @property
    def active(self) -> bool:
        return request.endpoint is not None and request.endpoint.split(".")[0] == self.endpoint.split(".")[0]


@dataclass(frozen=True)
class NavGroup:
    label: str
    items: tuple[NavItem, ...]


MAIN_ITEMS: tuple[NavItem, ...] = (
    NavItem("Tableau de bord", "main.dashboard", "home"),
    NavItem("Matériels", "materiels.index", "monitor"),
    NavItem("Affectations", "affectations.index", "link"),
    NavItem("Inventaires", "inventaires.index", "clipboard"),
    NavItem("Incidents", "incidents.index", "alert"),
    NavItem("Utilisateurs", "utilisateurs.index", "users", admin_only=True),
)

SETTINGS_GROUP = NavGroup(
    "Structure",
    (
        NavItem("Salles", "salles.index", "door"),
        NavItem("Positions", "positions.index", "plug"),
        NavItem("Personnels", "personnes.index", "id-card"),
    ),
)


def _visible(item: NavItem, user: AuthenticatedUser | None) -> bool:
    if item.admin_only:
        return user is not None and user.is_admin
    return True


def sidebar_for(user: AuthenticatedUser | None) -> tuple[list[NavItem], list[NavGroup]]:
    items = [item for item in MAIN_ITEMS if _visible(item, user)]
    groups = []
    for group in (SETTINGS_GROUP,):
        visible = tuple(item for item in group.items if _visible(item, user))
        if visible:
            groups.append(NavGroup(group.label, visible))
    return items, groups
