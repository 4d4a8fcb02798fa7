import unittest
from datetime import date

from support import FakeBackend
from trackit.api import affectations, auth, dashboard, incidents, materiels, personnes, utilisateurs
from trackit.api.client import ApiClient, ApiError
from trackit.models import Materiel, Personne


class ResourceTestCase(unittest.TestCase):
    def setUp(self):
        self.backend = FakeBackend()
        self.client = ApiClient("http://trackit.test/api", transport=self.backend.transport)

    def tearDown(self):
        self.client.close()


class MaterielResourceTests(ResourceTestCase):
    def test_count_by_statut_sums_group_rows(self):
        self.backend.on(
            "GET",
            "/materiels/count/statut",
            [{"statut": "Disponible", "count": 3}, {"status": "Affecté", "count": "2"}, {"count": 9}],
        )
        self.assertEqual(materiels.count_by_statut(self.client), {"Disponible": 3, "Affecté": 2})

    def test_count_by_marque_reads_total_materiels(self):
        self.backend.on("GET", "/materiels/count/marque", [{"marque": "Dell", "totalMateriels": 4}])
        self.assertEqual(materiels.count_by_salle_categorie_marque(self.client), {"Dell": 4})

    def test_count_by_statut_ignores_scalar_answer(self):
        self.backend.on("GET", "/materiels/count/statut", 3)
        self.assertEqual(materiels.count_by_statut(self.client), {})

    def test_count_materiels(self):
        self.backend.on("GET", "/materiels/count", {"total": 12})
        self.assertEqual(materiels.count_materiels(self.client), 12)

    def test_failure_carries_contextual_message(self):
        self.backend.on("GET", "/materiels", {"error": "boom"}, status=500)
        with self.assertRaises(ApiError) as caught:
            materiels.list_materiels(self.client)
        self.assertEqual(caught.exception.message, "Échec de la récupération de tous les matériels")
        self.assertEqual(caught.exception.status, 500)


class IncidentResourceTests(ResourceTestCase):
    def test_update_sends_status_and_description(self):
        self.backend.on("PUT", "/incidents/7", {"message": "ok"})
        incidents.update_incident(self.client, 7, statut_incident="Résolu", description="Écran remplacé")
        self.assertEqual(
            self.backend.last_json("PUT", "/incidents/7"),
            {"statutIncident": "Résolu", "description": "Écran remplacé"},
        )

    def test_count_by_statut_uses_statut_incident(self):
        self.backend.on(
            "GET",
            "/incidents/stats/by-statut",
            [{"statutIncident": "Ouvert", "count": 2}, {"statutIncident": "Fermé", "count": 5}],
        )
        self.assertEqual(incidents.count_by_statut(self.client), {"Ouvert": 2, "Fermé": 5})

    def test_create_formats_date(self):
        self.backend.on("POST", "/incidents", {"refIncident": 2}, status=201)
        incidents.create_incident(
            self.client,
            type_incident="Vol",
            date_inc=date(2024, 3, 1),
            ref_inventaire=7,
            matricule="M001",
            num_serie="SN1",
        )
        body = self.backend.last_json("POST", "/incidents")
        self.assertEqual(body["dateInc"], "2024-03-01")
        self.assertIsNone(body["description"])


class PersonneResourceTests(ResourceTestCase):
    def test_duplicate_matricule_reports_backend_message(self):
        self.backend.on("POST", "/personnes", {"message": "Matricule déjà utilisé"}, status=409)
        with self.assertRaises(ApiError) as caught:
            personnes.create_personne(self.client, Personne(matricule="M001", nom="Dupont"))
        self.assertEqual(caught.exception.message, "Matricule déjà utilisé")
        self.assertEqual(caught.exception.status, 409)

    def test_other_failures_use_generic_message(self):
        self.backend.on("POST", "/personnes", {"error": "invalide"}, status=400)
        with self.assertRaises(ApiError) as caught:
            personnes.create_personne(self.client, Personne(matricule="M001"))
        self.assertEqual(caught.exception.message, "Échec de la création de la personne")

    def test_update_does_not_send_matricule(self):
        self.backend.on("PUT", "/personnes/M001", {})
        personnes.update_personne(self.client, "M001", Personne(matricule="M001", nom="Martin"))
        body = self.backend.last_json("PUT", "/personnes/M001")
        self.assertNotIn("matricule", body)
        self.assertEqual(body["nom"], "Martin")


class UtilisateurResourceTests(ResourceTestCase):
    def test_update_without_password_keeps_it(self):
        self.backend.on("PUT", "/utilisateurs/M001", {})
        utilisateurs.update_utilisateur(self.client, "M001", nom_user="jdupont", role="Responsable", password="")
        self.assertEqual(
            self.backend.last_json("PUT", "/utilisateurs/M001"),
            {"nomUser": "jdupont", "role": "Responsable"},
        )

    def test_update_with_password(self):
        self.backend.on("PUT", "/utilisateurs/M001", {})
        utilisateurs.update_utilisateur(self.client, "M001", password="nouveau-secret")
        self.assertEqual(self.backend.last_json("PUT", "/utilisateurs/M001"), {"motDePasse": "nouveau-secret"})

    def test_unreachable_server_message(self):
        self.backend.fail("GET", "/utilisateurs")
        with self.assertRaises(ApiError) as caught:
            utilisateurs.list_utilisateurs(self.client)
        self.assertEqual(caught.exception.message, utilisateurs.SERVER_UNREACHABLE_MESSAGE)


class AffectationResourceTests(ResourceTestCase):
    def test_search_dispatches_to_most_specific_route(self):
        for path in (
            "/affectations/search/matricule",
            "/affectations/search/position",
            "/affectations/search/date-range",
            "/affectations/search/date-matricule",
            "/affectations/search/date-position",
        ):
            self.backend.on("GET", path, [])

        affectations.search_affectations(self.client, matricule="M001")
        affectations.search_affectations(self.client, ref_position="P1")
        affectations.search_affectations(self.client, start_date=date(2024, 1, 1), end_date=date(2024, 1, 31))
        affectations.search_affectations(
            self.client, start_date="2024-01-01", end_date="2024-01-31", matricule="M001", ref_position="P1"
        )
        affectations.search_affectations(
            self.client, start_date="2024-01-01", end_date="2024-01-31", ref_position="P1"
        )

        self.assertEqual(
            dict(self.backend.calls("GET", "/affectations/search/matricule")[0].url.params), {"matricule": "M001"}
        )
        self.assertEqual(
            dict(self.backend.calls("GET", "/affectations/search/position")[0].url.params), {"refPosition": "P1"}
        )
        self.assertEqual(
            dict(self.backend.calls("GET", "/affectations/search/date-range")[0].url.params),
            {"startDate": "2024-01-01", "endDate": "2024-01-31"},
        )
        self.assertEqual(len(self.backend.calls("GET", "/affectations/search/date-matricule")), 1)
        self.assertEqual(len(self.backend.calls("GET", "/affectations/search/date-position")), 1)

    def test_single_date_bound_is_not_a_range(self):
        self.backend.on("GET", "/affectations/search/matricule", [])
        affectations.search_affectations(self.client, start_date="2024-01-01", matricule="M001")
        self.assertEqual(len(self.backend.calls("GET", "/affectations/search/matricule")), 1)

    def test_search_without_criteria_is_invalid(self):
        with self.assertRaises(ApiError) as caught:
            affectations.search_affectations(self.client)
        self.assertEqual(caught.exception.kind, "validation")
        self.assertEqual(caught.exception.message, affectations.INVALID_SEARCH_MESSAGE)
        self.assertEqual(self.backend.requests, [])

    def test_close_sends_serial_number(self):
        self.backend.on("PUT", "/affectations/4/close", {"message": "ok"})
        affectations.close_affectation(self.client, 4, "SN-42")
        self.assertEqual(self.backend.last_json("PUT", "/affectations/4/close"), {"idMateriel": "SN-42"})

    def test_create_returns_reference_and_keeps_backend_message(self):
        self.backend.on("POST", "/affectations", {"refAffectation": 12}, status=201)
        self.assertEqual(
            affectations.create_affectation(self.client, matricule="M001", ref_position="P1", num_serie="SN1"), 12
        )
        self.backend.on("POST", "/affectations", {"error": "Position déjà occupée"}, status=400)
        with self.assertRaises(ApiError) as caught:
            affectations.create_affectation(self.client, matricule="M001", ref_position="P1", num_serie="SN1")
        self.assertEqual(caught.exception.message, "Position déjà occupée")


class AuthResourceTests(ResourceTestCase):
    def test_login_returns_user_and_token(self):
        self.backend.on(
            "POST",
            "/auth/login",
            {
                "message": "Connexion réussie",
                "user": {"matricule": "M001", "nomUser": "jdupont", "role": "Administrateur"},
                "token": "jwt",
            },
        )
        result = auth.login(self.client, "jdupont", "secret")
        self.assertEqual(result.user.matricule, "M001")
        self.assertTrue(result.user.is_admin)
        self.assertEqual(result.token, "jwt")
        self.assertEqual(
            self.backend.last_json("POST", "/auth/login"), {"emailOrUsername": "jdupont", "motDePasse": "secret"}
        )

    def test_login_without_token(self):
        self.backend.on("POST", "/auth/login", {"message": "ok", "user": {"matricule": "M001"}})
        self.assertIsNone(auth.login(self.client, "jdupont", "secret").token)

    def test_bad_credentials_are_a_client_error(self):
        self.backend.on("POST", "/auth/login", {"message": "Invalid credentials"}, status=401)
        with self.assertRaises(ApiError) as caught:
            auth.login(self.client, "jdupont", "mauvais")
        self.assertEqual(caught.exception.kind, "client")
        self.assertEqual(caught.exception.message, "Email / nom d'utilisateur ou mot de passe incorrect")

    def test_logout_failure_is_ignored(self):
        self.backend.fail("POST", "/auth/logout")
        auth.logout(self.client)


class DashboardResourceTests(ResourceTestCase):
    def test_stats(self):
        self.backend.on(
            "GET",
            "/dashboard/stats",
            {
                "totalMateriels": 40,
                "materielsByStatus": {"Disponible": 30, "Affecté": 10},
                "openIncidents": 3,
            },
        )
        stats = dashboard.get_stats(self.client)
        self.assertEqual(stats.total_materiels, 40)
        self.assertEqual(stats.materiels_by_status["Affecté"], 10)
        self.assertEqual(stats.open_incidents, 3)
        self.assertEqual(stats.total_incidents, 0)

    def test_monthly_evolution(self):
        self.backend.on(
            "GET",
            "/dashboard/monthly-evolution",
            [{"month": "Jan", "affectations": 2, "incidents": 1, "inventaires": 0, "materiels": 5}],
        )
        months = dashboard.get_monthly_evolution(self.client)
        self.assertEqual(months[0].month, "Jan")
        self.assertEqual(months[0].total, 8)


class MiscResourceTests(ResourceTestCase):
    def test_bulk_add_reports_inserted_and_skipped(self):
        self.backend.on("POST", "/materiels/bulk", {"inserted": 2, "skipped": 1}, status=201)
        result = materiels.bulk_add_materiels(
            self.client, [Materiel(num_serie="SN1", categorie="Souris"), Materiel(num_serie="SN2", categorie="Souris")]
        )
        self.assertEqual((result.inserted, result.skipped), (2, 1))
        self.assertEqual([row["numSerie"] for row in self.backend.last_json("POST", "/materiels/bulk")], ["SN1", "SN2"])

    def test_barcode_lookup_and_generation(self):
        self.backend.on("GET", "/materiels/barcode/ABC-1", {"numSerie": "SN1", "marque": "Dell"})
        self.backend.on("GET", "/materiels/generate-barcode/SN1", {"barcode": "data:image/png;base64,AAAA"})
        self.assertEqual(materiels.get_materiel_by_barcode(self.client, "ABC-1").marque, "Dell")
        self.assertTrue(materiels.generate_barcode(self.client, "SN1").startswith("data:image/png"))

    def test_filters_go_to_filter_routes(self):
        self.backend.on("GET", "/materiels/filter", [{"numSerie": "SN1"}])
        self.backend.on("GET", "/incidents/filter", [])
        self.assertEqual(len(materiels.filter_materiels(self.client, {"marque": "Dell", "modele": ""})), 1)
        incidents.filter_incidents(self.client, {"statutIncident": "Ouvert"})
        self.assertEqual(dict(self.backend.calls("GET", "/materiels/filter")[0].url.params), {"marque": "Dell"})
        self.assertEqual(len(self.backend.calls("GET", "/incidents/filter")), 1)

    def test_incident_totals(self):
        self.backend.on("GET", "/incidents/stats/open", {"total": 4})
        self.backend.on("GET", "/incidents/stats/total", {"total": 9})
        self.assertEqual(incidents.count_open_incidents(self.client), 4)
        self.assertEqual(incidents.count_incidents(self.client), 9)

    def test_user_info(self):
        self.backend.on("POST", "/auth/user-info", {"matricule": "M001", "nomUser": "jdupont", "role": "Responsable"})
        user = auth.user_info(self.client, "M001")
        self.assertEqual(user.nom_user, "jdupont")
        self.assertFalse(user.is_admin)
        self.assertEqual(self.backend.last_json("POST", "/auth/user-info"), {"matricule": "M001"})

    def test_update_affectation_sends_given_fields(self):
        self.backend.on("PUT", "/affectations/5", {})
        affectations.update_affectation(self.client, 5, ref_position="P9")
        self.assertEqual(self.backend.last_json("PUT", "/affectations/5"), {"refPosition": "P9"})
