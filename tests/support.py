"""Fake TrackIT backend and a base test case wired to it."""
from __future__ import annotations

import json
import unittest
from typing import Any, Callable

import httpx

from config import TestConfig
from trackit import create_app
from trackit.auth import TOKEN_KEY, USER_KEY
from trackit.models import AuthenticatedUser
from trackit.models.utilisateur import ROLE_ADMINISTRATEUR, ROLE_RESPONSABLE

API_ROOT = "/api"


class FakeBackend:
    """Answers requests from a table of canned responses, recording every call."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: list[httpx.Request] = []

    def on(self, method: str, path: str, json_body: Any = None, status: int = 200) -> None:
        self.routes[(method, API_ROOT + path)] = lambda request: httpx.Response(status, json=json_body)

    def handle(self, method: str, path: str, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.routes[(method, API_ROOT + path)] = handler

    def fail(self, method: str, path: str) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        self.routes[(method, API_ROOT + path)] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"message": f"Route inconnue {request.url.path}"})
        return handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == API_ROOT + path]

    def last_json(self, method: str, path: str) -> Any:
        return json.loads(self.calls(method, path)[-1].content)


class AppTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.backend = FakeBackend()
        self.app = create_app(TestConfig)
        self.app.config["TRACKIT_API_TRANSPORT"] = self.backend.transport
        self.client = self.app.test_client()

    def login(self, role: str = ROLE_RESPONSABLE, matricule: str = "M001") -> AuthenticatedUser:
        user = AuthenticatedUser(
            matricule=matricule,
            nom_user="jdupont",
            role=role,
            nom="Dupont",
            prenom="Jeanne",
            email="jeanne.dupont@example.com",
        )
        with self.client.session_transaction() as session:
            session[USER_KEY] = user.to_session()
            session[TOKEN_KEY] = "token-123"
        return user

    def login_admin(self) -> AuthenticatedUser:
        return self.login(role=ROLE_ADMINISTRATEUR, matricule="A001")

    @staticmethod
    def toasts(response, category: str) -> int:
        return response.get_data(as_text=True).count(f"toast toast-{category}")
