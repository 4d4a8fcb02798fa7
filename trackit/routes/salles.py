"""Rooms: the management page grouped by site and the room browser."""
from __future__ import annotations

from flask import Blueprint, current_app, redirect, render_template, request, url_for

from .. import notifications
from ..api import affectations as affectations_api
from ..api import inventaires as inventaires_api
from ..api import positions as positions_api
from ..api import salles as salles_api
from ..api.client import ApiError
from ..forms import SalleForm
from ..listing import SALLES, count_by, group_by, unique_values
from .common import attempt, client, fetch, find, requested_modal

bp = Blueprint("salles", __name__)

MODALS = {"add", "view", "edit", "delete"}


def _load():
    api_client = client()
    salles = salles_api.list_salles(api_client)
    positions = positions_api.list_positions(api_client)
    per_salle = count_by(positions, "ref_salle")
    for salle in salles:
        salle.nombre_positions = per_salle.get(salle.ref_salle, 0)
    return salles


def _operations(ref_salle: str):
    api_client = client()
    return (
        affectations_api.list_by_salle(api_client, ref_salle),
        inventaires_api.list_by_salle(api_client, ref_salle),
    )


def _render(modal=None, selected_id=None, form=None, status=200):
    fetched = fetch("Erreur lors du chargement des salles", _load, [])
    salles = fetched.data
    query = SALLES.query(request.args)

    modal = modal or requested_modal(MODALS)
    selected = find(salles, "ref_salle", selected_id or request.args.get("id"))
    if modal in {"view", "edit", "delete"} and selected is None:
        modal = None

    operations = ([], [])
    if modal == "view":
        operations = fetch(
            "Erreur lors du chargement des opérations",
            lambda: _operations(selected.ref_salle),
            ([], []),
        ).data
    elif modal == "add" and form is None:
        form = SalleForm(formdata=None)
    elif modal == "edit" and form is None:
        form = SalleForm(formdata=None, obj=selected)

    visible = query.sort.apply(SALLES.filter(salles, query))
    html = render_template(
        "salles/index.html",
        query=query,
        error=fetched.error,
        by_site=group_by(visible, "site"),
        shown=len(visible),
        total=len(salles),
        etages=unique_values(salles, "etage"),
        modal=modal,
        selected=selected,
        affectations=operations[0],
        inventaires=operations[1],
        form=form,
    )
    return html, status


def _back():
    return redirect(url_for("salles.index"))


@bp.route("/rooms")
def index():
    return _render()


@bp.route("/rooms/add", methods=["POST"])
def add():
    form = SalleForm()
    if not form.validate_on_submit():
        return _render("add", form=form, status=400)
    salle = form.to_salle()
    ok, _ = attempt("Erreur", lambda: salles_api.create_salle(client(), salle))
    if not ok:
        return _render("add", form=form)
    current_app.logger.info("Salle %s created", salle.ref_salle)
    notifications.success("Succès", "Salle ajoutée avec succès")
    return _back()


@bp.route("/rooms/<ref_salle>/edit", methods=["POST"])
def edit(ref_salle: str):
    form = SalleForm()
    if not form.validate_on_submit():
        return _render("edit", ref_salle, form=form, status=400)
    salle = form.to_salle()
    ok, _ = attempt("Erreur", lambda: salles_api.update_salle(client(), ref_salle, salle))
    if not ok:
        return _render("edit", ref_salle, form=form)
    notifications.success("Succès", "Salle modifiée avec succès")
    return _back()


@bp.route("/rooms/<ref_salle>/delete", methods=["POST"])
def delete(ref_salle: str):
    ok, _ = attempt("Erreur", lambda: salles_api.delete_salle(client(), ref_salle))
    if not ok:
        return _render()
    notifications.success("Succès", "Salle supprimée avec succès")
    return _back()


@bp.route("/liste-salles")
def browser():
    fetched = fetch("Erreur lors du chargement des salles", lambda: salles_api.list_salles(client()), [])
    salles = fetched.data
    query = SALLES.query(request.args)
    visible = SALLES.filter(salles, query)

    selected = find(salles, "ref_salle", request.args.get("id"))
    stats_error = None
    stats_by_category = {}
    if selected is not None:
        try:
            stats = salles_api.materiels_stats(client(), selected.ref_salle)
        except ApiError as exc:
            if exc.is_unauthorized:
                raise
            current_app.logger.info("Stats of %s unavailable: %s", selected.ref_salle, exc.message)
            stats_error = "Erreur lors du chargement des statistiques"
        else:
            stats_by_category = group_by(stats, "categorie")

    return render_template(
        "salles/browser.html",
        query=query,
        error=fetched.error,
        salles=visible,
        selected=selected,
        stats_by_category=stats_by_category,
        stats_error=stats_error,
    )
