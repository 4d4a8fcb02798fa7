"""Workstation positions inside rooms."""
from __future__ import annotations

from flask import Blueprint, current_app, redirect, render_template, request, url_for

from .. import notifications
from ..api import materiels as materiels_api
from ..api import positions as positions_api
from ..api import salles as salles_api
from ..api.client import ApiError
from ..forms import BulkPositionForm, PositionForm
from ..listing import POSITIONS, occupancy
from ..models.position import OCCUPATION_CHOICES
from .common import attempt, build_list, choices, client, fetch, find, requested_modal

bp = Blueprint("positions", __name__)

MODALS = {"add", "bulk", "view", "edit", "delete"}


def _load():
    api_client = client()
    positions = positions_api.list_positions(api_client)
    salles = salles_api.list_salles(api_client)
    names = {salle.ref_salle: salle.nom_salle for salle in salles}
    for position in positions:
        if not position.nom_salle:
            position.nom_salle = names.get(position.ref_salle)
    return positions, salles


def _salle_choices(salles):
    return choices(salles, lambda s: s.ref_salle, str, "Sélectionner une salle")


def _render(modal=None, selected_id=None, form=None, bulk_form=None, status=200):
    fetched = fetch("Erreur lors du chargement des positions", _load, ([], []))
    positions, salles = fetched.data

    modal = modal or requested_modal(MODALS)
    selected = find(positions, "ref_position", selected_id or request.args.get("id"))
    if modal in {"view", "edit", "delete"} and selected is None:
        modal = None

    linked = []
    if modal == "view":
        linked = fetch(
            "Erreur lors du chargement des matériels",
            lambda: [m for m in materiels_api.list_materiels(client()) if m.ref_position == selected.ref_position],
            [],
        ).data
    elif modal == "add" and form is None:
        form = PositionForm(formdata=None)
    elif modal == "edit" and form is None:
        form = PositionForm(formdata=None, obj=selected)
    elif modal == "bulk" and bulk_form is None:
        bulk_form = BulkPositionForm(formdata=None)
    if form is not None:
        form.ref_salle.choices = _salle_choices(salles)

    free, occupied = occupancy(positions)
    html = render_template(
        "positions/index.html",
        list=build_list(POSITIONS, positions, fetched.error),
        salles=salles,
        occupation_choices=OCCUPATION_CHOICES,
        free=free,
        occupied=occupied,
        modal=modal,
        selected=selected,
        linked=linked,
        form=form,
        bulk_form=bulk_form,
    )
    return html, status


def _back():
    return redirect(url_for("positions.index"))


def _bind_salles(form: PositionForm) -> bool:
    loaded = fetch("Erreur lors du chargement des salles", lambda: salles_api.list_salles(client()), [])
    form.ref_salle.choices = _salle_choices(loaded.data)
    return not loaded.failed


@bp.route("/positions")
def index():
    return _render()


@bp.route("/positions/add", methods=["POST"])
def add():
    form = PositionForm()
    if not _bind_salles(form):
        return _render()
    if not form.validate_on_submit():
        return _render("add", form=form, status=400)
    position = form.to_position()
    ok, _ = attempt("Erreur lors de l'ajout", lambda: positions_api.create_position(client(), position))
    if not ok:
        return _render("add", form=form)
    current_app.logger.info("Position %s created in %s", position.ref_position, position.ref_salle)
    notifications.success("Position ajoutée avec succès")
    return _back()


@bp.route("/positions/bulk", methods=["POST"])
def bulk_add():
    """Create every complete row; one failing row does not stop the others."""
    form = BulkPositionForm()
    if not form.validate_on_submit():
        return _render("bulk", bulk_form=form, status=400)
    api_client = client()
    created = []
    failed = []
    for position in form.to_positions():
        try:
            positions_api.create_position(api_client, position)
        except ApiError as exc:
            if exc.is_unauthorized:
                raise
            current_app.logger.warning("Position %s not created: %s", position.ref_position, exc.message)
            failed.append(position.ref_position)
        else:
            created.append(position.ref_position)
    if failed:
        notifications.error(
            "Erreur lors de l'ajout",
            f"{len(failed)} position(s) non ajoutée(s) : {', '.join(failed)}.",
        )
    if created:
        notifications.success("Positions ajoutées avec succès", f"{len(created)} position(s) ajoutée(s).")
    if not created:
        return _render("bulk", bulk_form=form)
    return _back()


@bp.route("/positions/<ref_position>/edit", methods=["POST"])
def edit(ref_position: str):
    form = PositionForm()
    if not _bind_salles(form):
        return _render()
    if not form.validate_on_submit():
        return _render("edit", ref_position, form=form, status=400)
    position = form.to_position()
    ok, _ = attempt(
        "Erreur lors de la modification",
        lambda: positions_api.update_position(client(), ref_position, position),
    )
    if not ok:
        return _render("edit", ref_position, form=form)
    notifications.success("Position modifiée avec succès")
    return _back()


@bp.route("/positions/<ref_position>/delete", methods=["POST"])
def delete(ref_position: str):
    ok, _ = attempt("Erreur lors de la suppression", lambda: positions_api.delete_position(client(), ref_position))
    if not ok:
        return _render()
    notifications.success("Position supprimée avec succès")
    return _back()
