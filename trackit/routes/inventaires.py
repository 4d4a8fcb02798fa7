"""Stock-takes. Filtering happens on the backend, sorting and paging here."""
from __future__ import annotations

from flask import Blueprint, current_app, redirect, render_template, request, url_for

from .. import notifications
from ..api import inventaires as inventaires_api
from ..api import salles as salles_api
from ..forms import InventaireStartForm, InventaireValidateForm
from ..listing import INVENTAIRES, ListQuery, paginate
from ..models.base import format_date
from .common import ListView, attempt, choices, client, fetch, find, per_page, requested_modal

bp = Blueprint("inventaires", __name__)

MODALS = {"start", "view", "validate", "delete"}


def backend_filters(query: ListQuery) -> dict[str, str | None]:
    return {
        "search": query.search or None,
        "dateDebut": format_date(query.date_from),
        "dateFin": format_date(query.date_to),
        "refSalle": query.filters.get("ref_salle"),
        "matricule": query.filters.get("matricule"),
    }


def checklist_rows(ref_salle: str) -> list[dict[str, object]]:
    """Equipment of a room counted by category, one unticked row each."""
    totals: dict[str, int] = {}
    for stat in salles_api.materiels_stats(client(), ref_salle):
        totals[stat.categorie] = totals.get(stat.categorie, 0) + stat.count
    return [{"categorie": categorie, "count": count, "confirmed": False} for categorie, count in totals.items()]


def _anomaly_report(unconfirmed: list[tuple[str, int]]) -> str:
    missing = ", ".join(f"{categorie} ({count})" for categorie, count in unconfirmed)
    return f"Anomalie détectée à l'inventaire, non confirmé : {missing}"


def _load(query: ListQuery):
    api_client = client()
    salles = salles_api.list_salles(api_client)
    if query.is_filtered:
        inventaires = inventaires_api.filter_inventaires(api_client, backend_filters(query))
    else:
        inventaires = inventaires_api.list_inventaires(api_client)
    return inventaires, salles


def _render(modal=None, selected_id=None, start_form=None, validate_form=None, status=200):
    query = INVENTAIRES.query(request.args)
    fetched = fetch("Erreur lors du chargement des inventaires", lambda: _load(query), ([], []))
    inventaires, salles = fetched.data

    modal = modal or requested_modal(MODALS)
    selected = find(inventaires, "ref_inventaire", selected_id or request.args.get("id"))
    if modal in {"view", "validate", "delete"} and selected is None:
        modal = None
    if modal == "validate" and selected.is_validated:
        modal = "view"

    if modal == "start" and start_form is None:
        # Second step once a room is picked: tick off its equipment by category.
        ref_salle = request.args.get("salle")
        if find(salles, "ref_salle", ref_salle) is not None:
            loaded = fetch(
                "Erreur lors du chargement des matériels de la salle",
                lambda: checklist_rows(ref_salle),
                None,
            )
            if not loaded.failed:
                start_form = InventaireStartForm(formdata=None, ref_salle=ref_salle, rows=loaded.data)
    if start_form is not None:
        start_form.ref_salle.choices = choices(salles, lambda s: s.ref_salle, str, "Sélectionner une salle")
    if modal == "validate" and validate_form is None:
        validate_form = InventaireValidateForm(formdata=None, observation=selected.observation)

    listing = ListView(
        query=query,
        page=paginate(query.sort.apply(inventaires), query.page, per_page()),
        error=fetched.error,
    )
    html = render_template(
        "inventaires/index.html",
        list=listing,
        salles=salles,
        validated=sum(1 for inventaire in inventaires if inventaire.is_validated),
        modal=modal,
        selected=selected,
        start_form=start_form,
        validate_form=validate_form,
    )
    return html, status


def _back(**args):
    return redirect(url_for("inventaires.index", **args))


@bp.route("/inventory")
def index():
    return _render()


@bp.route("/inventory/start", methods=["POST"])
def start():
    form = InventaireStartForm()
    loaded = fetch("Erreur lors du chargement des salles", lambda: salles_api.list_salles(client()), [])
    form.ref_salle.choices = choices(loaded.data, lambda s: s.ref_salle, str, "Sélectionner une salle")
    if loaded.failed:
        return _render()
    if not form.validate_on_submit():
        return _render("start", start_form=form, status=400)
    ok, ref = attempt(
        "Erreur lors de la création de l'inventaire",
        lambda: inventaires_api.start_inventaire(client(), form.ref_salle.data, (form.observation.data or "").strip()),
    )
    if not ok:
        return _render("start", start_form=form)
    current_app.logger.info("Inventaire %s started in %s", ref, form.ref_salle.data)
    notifications.success("Inventaire créé avec succès", f"Inventaire n° {ref} démarré." if ref else "")

    unconfirmed = form.unconfirmed()
    if unconfirmed:
        current_app.logger.warning("Inventaire %s: unconfirmed categories %s", ref, unconfirmed)
        notifications.warning("Anomalie détectée", "Signalez l'incident correspondant.")
        return redirect(
            url_for(
                "incidents.index",
                modal="add",
                ref_inventaire=ref,
                description=_anomaly_report(unconfirmed),
            )
        )
    return _back()


@bp.route("/inventory/<int:ref_inventaire>/validate", methods=["POST"])
def validate(ref_inventaire: int):
    form = InventaireValidateForm()
    if not form.validate_on_submit():
        return _render("validate", ref_inventaire, validate_form=form, status=400)
    observation = (form.observation.data or "").strip() or None
    ok, _ = attempt(
        "Erreur lors de la validation de l'inventaire",
        lambda: inventaires_api.validate_inventaire(client(), ref_inventaire, observation),
    )
    if not ok:
        return _render("validate", ref_inventaire, validate_form=form)
    notifications.success("Inventaire validé avec succès")
    return _back()


@bp.route("/inventory/<int:ref_inventaire>/delete", methods=["POST"])
def delete(ref_inventaire: int):
    ok, _ = attempt(
        "Erreur lors de la suppression de l'inventaire",
        lambda: inventaires_api.delete_inventaire(client(), ref_inventaire),
    )
    if not ok:
        return _render()
    notifications.success("Inventaire supprimé avec succès")
    return _back()
