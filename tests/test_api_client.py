import unittest

import httpx

from support import FakeBackend
from trackit.api.client import (
    NETWORK_ERROR_MESSAGE,
    SESSION_EXPIRED_MESSAGE,
    ApiClient,
    ApiError,
    backend_message,
    error_from_response,
    failure_message,
    to_records,
)
from trackit.models import Salle


class ErrorMappingTests(unittest.TestCase):
    def test_validation_error_prefers_backend_message(self):
        error = error_from_response(400, {"error": "Numéro de série manquant"})
        self.assertEqual(error.kind, "validation")
        self.assertEqual(error.message, "Numéro de série manquant")
        self.assertEqual(error.status, 400)

    def test_validation_error_default_message(self):
        error = error_from_response(400, None)
        self.assertEqual(error.message, "Données invalides. Vérifiez vos informations.")

    def test_unauthorized_is_session_expired(self):
        error = error_from_response(401, {"message": "Token invalide"})
        self.assertEqual(error.message, SESSION_EXPIRED_MESSAGE)
        self.assertTrue(error.is_unauthorized)
        self.assertEqual(error.detail, "Token invalide")

    def test_forbidden(self):
        error = error_from_response(403)
        self.assertEqual(error.kind, "authorization")
        self.assertEqual(error.message, "Accès refusé. Vous n'avez pas les permissions nécessaires.")

    def test_not_found_and_conflict(self):
        self.assertEqual(error_from_response(404).message, "Ressource non trouvée.")
        self.assertEqual(error_from_response(404).kind, "not_found")
        conflict = error_from_response(409, {"message": "Le matricule existe déjà"})
        self.assertEqual(conflict.kind, "conflict")
        self.assertEqual(conflict.message, "Le matricule existe déjà")
        self.assertEqual(error_from_response(409).message, "Conflit de données. L'élément existe déjà.")

    def test_unprocessable(self):
        self.assertEqual(error_from_response(422).message, "Données non traitables.")
        self.assertEqual(error_from_response(422).kind, "validation")

    def test_server_errors_hide_backend_message(self):
        internal = error_from_response(500, {"error": "ER_DUP_ENTRY"})
        self.assertEqual(internal.message, "Erreur interne du serveur. Réessayez plus tard.")
        self.assertEqual(internal.kind, "server")
        unavailable = error_from_response(503)
        self.assertEqual(unavailable.message, "Erreur du serveur. Veuillez réessayer.")

    def test_other_client_errors(self):
        error = error_from_response(418)
        self.assertEqual(error.kind, "client")
        self.assertEqual(error.message, "Erreur de requête.")

    def test_backend_message_shapes(self):
        self.assertEqual(backend_message({"error": {"message": "imbriqué"}}), "imbriqué")
        self.assertEqual(backend_message({"error": "texte"}), "texte")
        self.assertEqual(backend_message({"message": "simple"}), "simple")
        self.assertIsNone(backend_message({"error": ""}))
        self.assertIsNone(backend_message(["pas un objet"]))


class FailureMessageTests(unittest.TestCase):
    def test_replaces_message_and_keeps_status(self):
        with self.assertRaises(ApiError) as caught:
            with failure_message("Échec de la récupération"):
                raise error_from_response(404, {"message": "absent"})
        self.assertEqual(caught.exception.message, "Échec de la récupération")
        self.assertEqual(caught.exception.status, 404)
        self.assertEqual(caught.exception.detail, "absent")

    def test_prefer_backend_uses_detail(self):
        with self.assertRaises(ApiError) as caught:
            with failure_message("Erreur générique", prefer_backend=True):
                raise error_from_response(400, {"error": "Position déjà occupée"})
        self.assertEqual(caught.exception.message, "Position déjà occupée")

    def test_prefer_backend_falls_back_without_detail(self):
        with self.assertRaises(ApiError) as caught:
            with failure_message("Erreur générique", prefer_backend=True):
                raise error_from_response(500)
        self.assertEqual(caught.exception.message, "Erreur générique")

    def test_network_message(self):
        with self.assertRaises(ApiError) as caught:
            with failure_message("Erreur", network_message="Serveur injoignable"):
                raise ApiError(NETWORK_ERROR_MESSAGE, kind="network")
        self.assertEqual(caught.exception.message, "Serveur injoignable")
        self.assertTrue(caught.exception.is_network)

    def test_unauthorized_stays_unauthorized(self):
        with self.assertRaises(ApiError) as caught:
            with failure_message("Échec"):
                raise error_from_response(401)
        self.assertTrue(caught.exception.is_unauthorized)


class ApiClientTests(unittest.TestCase):
    def setUp(self):
        self.backend = FakeBackend()
        self.client = ApiClient("http://trackit.test/api", token="secret", transport=self.backend.transport)

    def tearDown(self):
        self.client.close()

    def test_sends_bearer_token_and_json(self):
        self.backend.on("POST", "/salles", {"message": "ok"}, status=201)
        self.assertEqual(self.client.post("/salles", {"refSalle": "S1"}), {"message": "ok"})
        request = self.backend.calls("POST", "/salles")[0]
        self.assertEqual(request.headers["Authorization"], "Bearer secret")
        self.assertEqual(self.backend.last_json("POST", "/salles"), {"refSalle": "S1"})

    def test_drops_empty_query_parameters(self):
        self.backend.on("GET", "/inventaires", [])
        self.client.get("/inventaires", params={"search": "", "refSalle": "S1", "matricule": None})
        request = self.backend.calls("GET", "/inventaires")[0]
        self.assertEqual(dict(request.url.params), {"refSalle": "S1"})

    def test_empty_body_decodes_to_none(self):
        self.backend.routes[("DELETE", "/api/salles/S1")] = lambda request: httpx.Response(204)
        self.assertIsNone(self.client.delete("/salles/S1"))

    def test_error_status_raises_mapped_error(self):
        self.backend.on("GET", "/salles/S9", {"message": "Salle introuvable"}, status=404)
        with self.assertRaises(ApiError) as caught:
            self.client.get("/salles/S9")
        self.assertEqual(caught.exception.status, 404)
        self.assertEqual(caught.exception.message, "Salle introuvable")

    def test_transport_failure_is_network_error(self):
        self.backend.fail("GET", "/salles")
        with self.assertRaises(ApiError) as caught:
            self.client.get("/salles")
        self.assertEqual(caught.exception.status, 0)
        self.assertTrue(caught.exception.is_network)
        self.assertEqual(caught.exception.message, NETWORK_ERROR_MESSAGE)

    def test_to_records_skips_non_objects(self):
        salles = to_records([{"refSalle": "S1"}, "bruit", None], Salle.from_api)
        self.assertEqual([salle.ref_salle for salle in salles], ["S1"])
        self.assertEqual(to_records({"refSalle": "S1"}, Salle.from_api), [])
