"""Login, logout and profile lookups against ``/auth``."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from ..models import AuthenticatedUser
from .client import ApiClient, ApiError


logger = logging.getLogger(__name__)

LOGIN_ERROR_MESSAGES = {
    400: "Données de connexion invalides",
    401: "Email / nom d'utilisateur ou mot de passe incorrect",
    403: "Accès refusé",
    500: "Erreur interne du serveur",
}
LOGIN_NETWORK_MESSAGE = "Impossible de se connecter au serveur. Vérifier votre connexion."


@dataclass
class LoginResult:
    message: str
    user: AuthenticatedUser
    token: str | None = None


def login(client: ApiClient, identifier: str, password: str) -> LoginResult:
    """Authenticate with an e-mail address or a user name.

    Failures are re-raised with a message tailored to the login page. A 401
    here means bad credentials, so it is reported with kind ``client`` to keep
    it from being treated as an expired session.
    """

    payload = {"emailOrUsername": identifier, "motDePasse": password}
    try:
        data = client.post("/auth/login", payload) or {}
    except ApiError as exc:
        if exc.is_network:
            raise exc.with_message(LOGIN_NETWORK_MESSAGE) from exc
        message = LOGIN_ERROR_MESSAGES.get(exc.status, exc.message or "Erreur lors de la connexion")
        kind = "client" if exc.is_unauthorized else exc.kind
        raise ApiError(message, status=exc.status, kind=kind, detail=exc.detail) from exc

    user = AuthenticatedUser.from_api(data.get("user") or {})
    return LoginResult(message=str(data.get("message") or ""), user=user, token=data.get("token"))


def logout(client: ApiClient) -> None:
    """Tell the backend the session ends. Failures never block a local logout."""
    try:
        client.post("/auth/logout")
    except ApiError as exc:
        logger.info("Backend logout failed, clearing the local session anyway: %s", exc.message)


def user_info(client: ApiClient, matricule: str) -> AuthenticatedUser:
    try:
        data = client.post("/auth/user-info", {"matricule": matricule}) or {}
    except ApiError as exc:
        raise exc.with_message(exc.message or "Erreur lors de la récupération des infos utilisateur") from exc
    return AuthenticatedUser.from_api(data)
