"""HTTP client shared by every TrackIT resource wrapper."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Mapping, TypeVar

import httpx


logger = logging.getLogger(__name__)

T = TypeVar("T")

NETWORK_ERROR_MESSAGE = "Erreur de connexion réseau. Vérifiez votre connexion internet."
SESSION_EXPIRED_MESSAGE = "Session expirée. Veuillez vous reconnecter."
DEFAULT_ERROR_MESSAGE = "Une erreur inattendue s'est produite."


class ApiError(RuntimeError):
    """Failure of a call to the TrackIT backend.

    ``kind`` classifies the failure the way the pages react to it
    (``network``, ``validation``, ``authorization``, ``not_found``,
    ``conflict``, ``server``, ``client`` or ``error``), ``status`` is the HTTP
    status (``0`` when no response was received) and ``detail`` carries the
    message sent by the backend, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        status: int = 0,
        kind: str = "error",
        detail: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.kind = kind
        self.detail = detail

    @property
    def is_unauthorized(self) -> bool:
        return self.status == 401

    @property
    def is_network(self) -> bool:
        return self.kind == "network"

    def with_message(self, message: str) -> "ApiError":
        return ApiError(message, status=self.status, kind=self.kind, detail=self.detail)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<ApiError {self.status} {self.kind}: {self.message}>"


def backend_message(data: Any) -> str | None:
    """Extract the human readable message from a backend error body."""

    if not isinstance(data, Mapping):
        return None
    error = data.get("error")
    if isinstance(error, Mapping):
        message = error.get("message")
        if message:
            return str(message)
    elif isinstance(error, str) and error:
        return error
    message = data.get("message")
    if isinstance(message, str) and message:
        return message
    return None


def error_from_response(status: int, data: Any = None) -> ApiError:
    """Map an HTTP error status onto the localised message shown to users."""

    detail = backend_message(data)

    if status == 400:
        return ApiError(
            detail or "Données invalides. Vérifiez vos informations.",
            status=status,
            kind="validation",
            detail=detail,
        )
    if status == 401:
        return ApiError(SESSION_EXPIRED_MESSAGE, status=status, kind="error", detail=detail)
    if status == 403:
        return ApiError(
            "Accès refusé. Vous n'avez pas les permissions nécessaires.",
            status=status,
            kind="authorization",
            detail=detail,
        )
    if status == 404:
        return ApiError(detail or "Ressource non trouvée.", status=status, kind="not_found", detail=detail)
    if status == 409:
        return ApiError(
            detail or "Conflit de données. L'élément existe déjà.",
            status=status,
            kind="conflict",
            detail=detail,
        )
    if status == 422:
        return ApiError(detail or "Données non traitables.", status=status, kind="validation", detail=detail)
    if status == 500:
        return ApiError(
            "Erreur interne du serveur. Réessayez plus tard.",
            status=status,
            kind="server",
            detail=detail,
        )
    if status > 500:
        return ApiError("Erreur du serveur. Veuillez réessayer.", status=status, kind="server", detail=detail)
    if status >= 400:
        return ApiError(detail or "Erreur de requête.", status=status, kind="client", detail=detail)
    return ApiError(DEFAULT_ERROR_MESSAGE, status=status, kind="error", detail=detail)


@contextmanager
def failure_message(
    message: str,
    *,
    prefer_backend: bool = False,
    network_message: str | None = None,
) -> Iterator[None]:
    """Re-raise :class:`ApiError` with the caller's contextual message.

    Status and kind are preserved so that a 401 still forces a logout. With
    ``prefer_backend`` the backend's own message wins when it sent one;
    ``network_message`` replaces the message when no response came back.
    """

    try:
        yield
    except ApiError as exc:
        if network_message and exc.is_network:
            raise exc.with_message(network_message) from exc
        if prefer_backend and exc.detail:
            raise exc.with_message(exc.detail) from exc
        raise exc.with_message(message) from exc


def _clean_params(params: Mapping[str, Any] | None) -> dict[str, Any] | None:
    if not params:
        return None
    cleaned = {key: value for key, value in params.items() if value not in (None, "")}
    return cleaned or None


class ApiClient:
    """Thin JSON wrapper around :class:`httpx.Client`."""

    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        # httpx sets Content-Type per request: JSON bodies or multipart uploads.
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=f"{self.base_url}/",
            headers=headers,
            timeout=httpx.Timeout(timeout, connect=min(timeout, 5.0)),
            transport=transport,
        )

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
        files: Mapping[str, Any] | None = None,
    ) -> Any:
        url = path.lstrip("/")
        try:
            response = self._client.request(method, url, params=_clean_params(params), json=json, files=files)
        except httpx.HTTPError as exc:
            logger.warning("%s /%s failed: no response from backend (%s)", method, url, exc)
            raise ApiError(NETWORK_ERROR_MESSAGE, status=0, kind="network") from exc

        data = self._decode(response)
        if response.is_error:
            error = error_from_response(response.status_code, data)
            logger.warning(
                "%s /%s failed with HTTP %s (%s): %s",
                method,
                url,
                response.status_code,
                error.kind,
                error.detail or error.message,
            )
            raise error
        logger.debug("%s /%s -> %s", method, url, response.status_code)
        return data

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    def get(self, path: str, *, params: Mapping[str, Any] | None = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None, files: Mapping[str, Any] | None = None) -> Any:
        return self.request("POST", path, json=json, files=files)

    def put(self, path: str, json: Any = None) -> Any:
        return self.request("PUT", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def to_records(data: Any, factory: Callable[[Mapping[str, Any]], T]) -> list[T]:
    """Build records from a JSON array, ignoring anything that is not an object."""

    if not isinstance(data, list):
        return []
    return [factory(item) for item in data if isinstance(item, Mapping)]
