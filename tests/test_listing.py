import unittest
from datetime import date, datetime

from trackit.listing import (
    AFFECTATIONS,
    INCIDENTS,
    INVENTAIRES,
    MATERIELS,
    PERSONNES,
    POSITIONS,
    SALLES,
    UTILISATEURS,
    ListQuery,
    SortConfig,
    contains,
    count_by,
    group_by,
    in_date_range,
    occupancy,
    paginate,
    split_active,
    unique_values,
)
from trackit.models import Affectation, Incident, Inventaire, Materiel, Personne, Position, Salle, Utilisateur


class FilterTests(unittest.TestCase):
    def test_contains_is_case_insensitive(self):
        self.assertTrue(contains("Dell Latitude", "latitude"))
        self.assertTrue(contains("anything", ""))
        self.assertFalse(contains(None, "x"))
        self.assertTrue(contains(date(2024, 3, 1), "2024-03"))

    def test_date_range_is_inclusive(self):
        start, end = date(2024, 1, 1), date(2024, 1, 31)
        self.assertTrue(in_date_range(date(2024, 1, 1), start, end))
        self.assertTrue(in_date_range(datetime(2024, 1, 31, 23, 0), start, end))
        self.assertFalse(in_date_range(date(2024, 2, 1), start, end))
        self.assertTrue(in_date_range(date(2023, 1, 1), None, end))
        self.assertFalse(in_date_range(None, start, None))
        self.assertTrue(in_date_range(None, None, None))

    def test_personnes_filters_are_exact(self):
        people = [
            Personne(matricule="M1", nom="Dupont", poste="Développeur", projet="Projet A"),
            Personne(matricule="M2", nom="Durand", poste="Développeur senior", projet="Projet B"),
        ]
        query = PERSONNES.query({"poste": "Développeur"})
        self.assertEqual([p.matricule for p in PERSONNES.filter(people, query)], ["M1"])

    def test_search_matches_any_field(self):
        people = [
            Personne(matricule="M1", nom="Dupont", email="jd@example.com"),
            Personne(matricule="M2", nom="Martin", email="martin@example.com"),
        ]
        query = PERSONNES.query({"q": "JD@"})
        self.assertEqual([p.matricule for p in PERSONNES.filter(people, query)], ["M1"])

    def test_materiels_filters(self):
        items = [
            Materiel(num_serie="SN1", marque="Dell", modele="Latitude 5420", categorie="Laptop",
                     status="Disponible", date_ajout=date(2024, 1, 10)),
            Materiel(num_serie="SN2", marque="Dell", modele="OptiPlex", categorie="UC",
                     status="En panne", date_ajout=date(2024, 3, 5)),
            Materiel(num_serie="SN3", marque="HP", modele="LaserJet", categorie="Imprimante", status="Disponible"),
        ]

        def serials(args):
            return [m.num_serie for m in MATERIELS.filter(items, MATERIELS.query(args))]

        self.assertEqual(serials({"marque": "dell"}), ["SN1", "SN2"])
        self.assertEqual(serials({"modele": "plex"}), ["SN2"])
        self.assertEqual(serials({"categorie": "imprim"}), ["SN3"])
        self.assertEqual(serials({"status": "disponible", "marque": "Dell"}), ["SN1"])
        self.assertEqual(serials({"date_from": "2024-02-01"}), ["SN2"])

    def test_incidents_filters(self):
        items = [
            Incident(ref_incident=1, type_incident="Panne", statut_incident="Ouvert", ref_inventaire="4",
                     num_serie="SN1", matricule="M001"),
            Incident(ref_incident=2, type_incident="Perte", statut_incident="Résolu", ref_inventaire="5",
                     num_serie="SN2", matricule="M002"),
        ]

        def refs(args):
            return [i.ref_incident for i in INCIDENTS.filter(items, INCIDENTS.query(args))]

        self.assertEqual(refs({"type_incident": "perte"}), [2])
        self.assertEqual(refs({"statut_incident": "ouvert"}), [1])
        self.assertEqual(refs({"num_serie": "sn2"}), [2])
        self.assertEqual(refs({"matricule": "M001"}), [1])
        self.assertEqual(refs({"ref_inventaire": "5"}), [2])
        self.assertEqual(refs({"ref_incident": "1"}), [1])

    def test_positions_filters_are_exact(self):
        items = [
            Position(ref_position="P1", occupation="Libre", ref_salle="S1"),
            Position(ref_position="P2", occupation="Occupée", ref_salle="S1"),
            Position(ref_position="P3", occupation="Libre", ref_salle="S10"),
        ]

        def refs(args):
            return [p.ref_position for p in POSITIONS.filter(items, POSITIONS.query(args))]

        self.assertEqual(refs({"ref_salle": "S1"}), ["P1", "P2"])
        self.assertEqual(refs({"occupation": "Libre"}), ["P1", "P3"])
        self.assertEqual(refs({"occupation": "Libre", "ref_salle": "S1"}), ["P1"])

    def test_utilisateurs_role_filter(self):
        items = [
            Utilisateur(matricule="A001", role="Administrateur"),
            Utilisateur(matricule="A002", role="admin"),
            Utilisateur(matricule="M001", role="Responsable"),
        ]
        query = UTILISATEURS.query({"role": "ADMIN"})
        self.assertEqual([u.matricule for u in UTILISATEURS.filter(items, query)], ["A001", "A002"])

    def test_salles_floor_filter_is_exact(self):
        items = [Salle(ref_salle="S1", etage="1"), Salle(ref_salle="S2", etage="10"), Salle(ref_salle="S3", etage="1")]
        query = SALLES.query({"etage": "1"})
        self.assertEqual([s.ref_salle for s in SALLES.filter(items, query)], ["S1", "S3"])

    def test_inventaires_filters(self):
        items = [
            Inventaire(ref_inventaire=1, ref_salle="S1", matricule="M001", date=date(2024, 5, 2)),
            Inventaire(ref_inventaire=2, ref_salle="S2", matricule="M002", date=date(2024, 6, 2)),
            Inventaire(ref_inventaire=3, ref_salle="S1", matricule="M002"),
        ]

        def refs(args):
            return [i.ref_inventaire for i in INVENTAIRES.filter(items, INVENTAIRES.query(args))]

        self.assertEqual(refs({"ref_salle": "S1"}), [1, 3])
        self.assertEqual(refs({"matricule": "m002"}), [2, 3])
        self.assertEqual(refs({"date_from": "2024-05-01", "date_to": "2024-05-31"}), [1])


class SortTests(unittest.TestCase):
    def test_toggle(self):
        self.assertEqual(SortConfig().toggle("marque"), SortConfig("marque", "asc"))
        self.assertEqual(SortConfig("marque", "asc").toggle("marque"), SortConfig("marque", "desc"))
        self.assertEqual(SortConfig("marque", "desc").toggle("marque"), SortConfig("marque", "asc"))
        self.assertEqual(SortConfig("marque", "desc").toggle("modele"), SortConfig("modele", "asc"))

    def test_numbers_sort_numerically(self):
        affectations = [Affectation(ref_affectation=n) for n in (10, 2, 33)]
        ordered = SortConfig("ref_affectation", "desc").apply(affectations)
        self.assertEqual([a.ref_affectation for a in ordered], [33, 10, 2])

    def test_text_sort_ignores_case(self):
        salles = [Salle(ref_salle=ref) for ref in ("b2", "A1", "a3")]
        self.assertEqual([s.ref_salle for s in SortConfig("ref_salle").apply(salles)], ["A1", "a3", "b2"])


class PaginationTests(unittest.TestCase):
    def test_page_slices(self):
        page = paginate(list(range(25)), page=3, per_page=10)
        self.assertEqual(page.items, list(range(20, 25)))
        self.assertEqual(page.pages, 3)
        self.assertTrue(page.has_prev)
        self.assertFalse(page.has_next)
        self.assertEqual((page.first_index, page.last_index), (21, 25))

    def test_page_out_of_range_is_clamped(self):
        self.assertEqual(paginate(list(range(25)), page=9, per_page=10).page, 3)
        self.assertEqual(paginate(list(range(25)), page=-1, per_page=10).page, 1)

    def test_empty_list(self):
        page = paginate([], page=2)
        self.assertEqual(page.pages, 0)
        self.assertEqual(page.page, 1)
        self.assertEqual(page.first_index, 0)
        self.assertFalse(page.has_next)


class ListQueryTests(unittest.TestCase):
    def test_from_args(self):
        query = ListQuery.from_args(
            {"q": " dell ", "date_from": "2024-01-01", "sort": "marque", "dir": "sideways", "page": "x", "marque": "D"},
            filter_fields=("marque", "modele"),
        )
        self.assertEqual(query.search, "dell")
        self.assertEqual(query.date_from, date(2024, 1, 1))
        self.assertEqual(query.sort, SortConfig("marque", "asc"))
        self.assertEqual(query.page, 1)
        self.assertEqual(query.filters, {"marque": "D"})
        self.assertTrue(query.is_filtered)

    def test_to_args_drops_defaults(self):
        self.assertEqual(ListQuery().to_args(), {})
        query = ListQuery(search="hp", sort=SortConfig("modele", "asc"), page=2)
        self.assertEqual(query.to_args(), {"q": "hp", "sort": "modele", "dir": "asc", "page": 2})
        self.assertEqual(query.sort_args("modele"), {"q": "hp", "sort": "modele", "dir": "desc"})
        self.assertEqual(query.page_args(3)["page"], 3)

    def test_run_filters_sorts_and_pages(self):
        materiels = [
            Materiel(num_serie=f"SN{n:02d}", marque="Dell" if n % 2 else "HP", date_ajout=date(2024, 1, n))
            for n in range(1, 21)
        ]
        query = MATERIELS.query({"marque": "dell", "sort": "num_serie", "dir": "desc", "date_to": "2024-01-15"})
        page = MATERIELS.run(materiels, query, per_page=5)
        self.assertEqual(page.total, 8)
        self.assertEqual(page.items[0].num_serie, "SN15")


class AggregateTests(unittest.TestCase):
    def test_count_by(self):
        positions = [Position(ref_position="P1", ref_salle="S1"), Position(ref_position="P2", ref_salle="S1")]
        self.assertEqual(count_by(positions, "ref_salle"), {"S1": 2})
        self.assertEqual(count_by(positions, lambda p: p.ref_position[-1]), {"1": 1, "2": 1})

    def test_group_by_sorts_groups(self):
        salles = [Salle(ref_salle="S1", site="Tunis"), Salle(ref_salle="S2", site="ariana"), Salle(ref_salle="S3", site="Tunis")]
        groups = group_by(salles, "site")
        self.assertEqual(list(groups), ["ariana", "Tunis"])
        self.assertEqual([s.ref_salle for s in groups["Tunis"]], ["S1", "S3"])

    def test_split_active(self):
        today = date(2024, 6, 1)
        open_ended = Affectation(ref_affectation=1)
        future = Affectation(ref_affectation=2, date_fin=date(2024, 7, 1))
        ended = Affectation(ref_affectation=3, date_fin=date(2024, 6, 1))
        active, closed = split_active([open_ended, future, ended], today)
        self.assertEqual(active, [open_ended, future])
        self.assertEqual(closed, [ended])

    def test_occupancy(self):
        positions = [
            Position(ref_position="P1", occupation="Libre"),
            Position(ref_position="P2", occupation="Occupée"),
            Position(ref_position="P3"),
        ]
        self.assertEqual(occupancy(positions), (2, 1))

    def test_unique_values(self):
        people = [Personne(matricule="1", poste="b"), Personne(matricule="2", poste="A"), Personne(matricule="3", poste="")]
        self.assertEqual(unique_values(people, "poste"), ["A", "b"])

    def test_affectation_listing_searches_names(self):
        rows = [Affectation(ref_affectation=1, nom="Dupont"), Affectation(ref_affectation=2, nom="Martin")]
        self.assertEqual(len(AFFECTATIONS.filter(rows, AFFECTATIONS.query({"q": "mart"}))), 1)
