"""Flask extensions used by the application."""
from __future__ import annotations

from flask import Flask, current_app, g, has_request_context
from flask_wtf import CSRFProtect

from .api.client import ApiClient


class TrackitApi:
    """One :class:`ApiClient` per application context, bound to the session token."""

    def __init__(self, app: Flask | None = None) -> None:
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        app.extensions["trackit_api"] = self
        app.teardown_appcontext(self._teardown)

    @property
    def client(self) -> ApiClient:
        if "trackit_api_client" not in g:
            from .auth import current_token

            config = current_app.config
            g.trackit_api_client = ApiClient(
                config["TRACKIT_API_URL"],
                token=current_token() if has_request_context() else None,
                timeout=config.get("TRACKIT_API_TIMEOUT", 10.0),
                transport=config.get("TRACKIT_API_TRANSPORT"),
            )
        return g.trackit_api_client

    def reset(self) -> None:
        """Drop the cached client, e.g. after the session token changed."""
        self._teardown(None)

    @staticmethod
    def _teardown(exception: BaseException | None) -> None:
        client = g.pop("trackit_api_client", None)
        if client is not None:
            client.close()


csrf = CSRFProtect()
api = TrackitApi()
