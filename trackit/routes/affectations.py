"""Assignments list, creation, closing and the backend search."""
from __future__ import annotations

from flask import Blueprint, current_app, redirect, render_template, request, url_for

from .. import notifications
from ..api import affectations as affectations_api
from ..api import materiels as materiels_api
from ..api import personnes as personnes_api
from ..api import positions as positions_api
from ..forms import AffectationEditForm, AffectationForm, AffectationSearchForm
from ..listing import AFFECTATIONS, split_active
from ..models.position import OCCUPATION_LIBRE
from .common import attempt, build_list, choices, client, fetch, find, requested_modal

bp = Blueprint("affectations", __name__)

MODALS = {"add", "view", "edit", "close", "delete"}
SEARCH_PREFIX = "s"


def _search_form() -> AffectationSearchForm:
    return AffectationSearchForm(formdata=request.args, prefix=SEARCH_PREFIX)


def _load(search: AffectationSearchForm):
    api_client = client()
    if search.has_criteria and search.validate():
        return affectations_api.search_affectations(
            api_client,
            start_date=search.start_date.data,
            end_date=search.end_date.data,
            matricule=(search.matricule.data or "").strip() or None,
            ref_position=(search.ref_position.data or "").strip() or None,
        )
    return affectations_api.list_affectations(api_client)


def _creation_choices(form: AffectationForm) -> None:
    api_client = client()
    personnes = personnes_api.list_personnes(api_client)
    positions = positions_api.list_positions(api_client)
    materiels = materiels_api.list_materiels(api_client)
    form.matricule.choices = choices(
        personnes, lambda p: p.matricule, lambda p: f"{p.matricule} - {p.full_name}", "Sélectionner une personne"
    )
    form.ref_position.choices = choices(
        [position for position in positions if position.occupation == OCCUPATION_LIBRE],
        lambda p: p.ref_position,
        lambda p: f"{p.ref_position} - {p.design_position}",
        "Sélectionner une position",
    )
    form.num_serie.choices = choices(
        [materiel for materiel in materiels if materiel.is_available],
        lambda m: m.num_serie,
        lambda m: m.label,
        "Sélectionner un matériel",
    )


def _edit_choices(form: AffectationEditForm) -> None:
    api_client = client()
    personnes = personnes_api.list_personnes(api_client)
    positions = positions_api.list_positions(api_client)
    form.matricule.choices = choices(
        personnes, lambda p: p.matricule, lambda p: f"{p.matricule} - {p.full_name}", "Sélectionner une personne"
    )
    form.ref_position.choices = choices(
        positions, lambda p: p.ref_position, lambda p: f"{p.ref_position} - {p.design_position}", "Sélectionner une position"
    )


def _linked_materiel(ref_affectation: int):
    materiels = materiels_api.list_materiels(client())
    return find(materiels, "ref_affectation", ref_affectation)


def _render(modal=None, selected_id=None, form=None, status=200):
    search = _search_form()
    fetched = fetch("Erreur lors du chargement des affectations", lambda: _load(search), [])
    affectations = fetched.data
    active, closed = split_active(affectations)

    modal = modal or requested_modal(MODALS)
    selected = find(affectations, "ref_affectation", selected_id or request.args.get("id"))
    if modal in {"view", "edit", "close", "delete"} and selected is None:
        modal = None
    if modal == "close" and not selected.is_active():
        modal = "view"

    materiel = None
    if modal in {"view", "close"}:
        materiel = fetch(
            "Erreur lors du chargement du matériel",
            lambda: _linked_materiel(selected.ref_affectation),
            None,
        ).data
    elif modal == "add" and form is None:
        form = AffectationForm(formdata=None)
        loaded = fetch(
            "Erreur lors du chargement des personnes, positions et matériels",
            lambda: _creation_choices(form),
            None,
        )
        if loaded.failed:
            modal = None
    elif modal == "edit" and form is None:
        form = AffectationEditForm(formdata=None, obj=selected)
        loaded = fetch("Erreur lors du chargement des données", lambda: _edit_choices(form), None)
        if loaded.failed:
            modal = None

    html = render_template(
        "affectations/index.html",
        list=build_list(AFFECTATIONS, affectations, fetched.error),
        search=search,
        search_args={key: value for key, value in request.args.items() if key.startswith(f"{SEARCH_PREFIX}-")},
        total=len(affectations),
        active=len(active),
        closed=len(closed),
        modal=modal,
        selected=selected,
        materiel=materiel,
        form=form,
    )
    return html, status


def _back():
    return redirect(url_for("affectations.index"))


@bp.route("/affectations")
def index():
    return _render()


@bp.route("/affectations/add", methods=["POST"])
def add():
    form = AffectationForm()
    loaded = fetch(
        "Erreur lors du chargement des personnes, positions et matériels",
        lambda: _creation_choices(form),
        None,
    )
    if loaded.failed:
        return _render()
    if not form.validate_on_submit():
        return _render("add", form=form, status=400)
    ok, ref = attempt(
        "Erreur lors de la création de l'affectation",
        lambda: affectations_api.create_affectation(
            client(),
            matricule=form.matricule.data,
            ref_position=form.ref_position.data,
            num_serie=form.num_serie.data,
        ),
    )
    if not ok:
        return _render("add", form=form)
    current_app.logger.info("Affectation %s created for %s", ref, form.matricule.data)
    notifications.success("Affectation créée avec succès")
    return _back()


@bp.route("/affectations/<int:ref_affectation>/edit", methods=["POST"])
def edit(ref_affectation: int):
    form = AffectationEditForm()
    loaded = fetch("Erreur lors du chargement des données", lambda: _edit_choices(form), None)
    if loaded.failed:
        return _render()
    if not form.validate_on_submit():
        return _render("edit", ref_affectation, form=form, status=400)
    ok, _ = attempt(
        "Erreur lors de la mise à jour de l'affectation",
        lambda: affectations_api.update_affectation(
            client(),
            ref_affectation,
            matricule=form.matricule.data or None,
            ref_position=form.ref_position.data or None,
        ),
    )
    if not ok:
        return _render("edit", ref_affectation, form=form)
    current_app.logger.info("Affectation %s updated", ref_affectation)
    notifications.success("Affectation mise à jour avec succès")
    return _back()


@bp.route("/affectations/<int:ref_affectation>/close", methods=["POST"])
def close(ref_affectation: int):
    num_serie = (request.form.get("num_serie") or "").strip()
    if not num_serie:
        loaded = fetch(
            "Erreur lors de la clôture de l'affectation",
            lambda: _linked_materiel(ref_affectation),
            None,
        )
        if loaded.failed:
            return _render()
        num_serie = loaded.data.num_serie if loaded.data else ""
    ok, _ = attempt(
        "Erreur lors de la clôture de l'affectation",
        lambda: affectations_api.close_affectation(client(), ref_affectation, num_serie),
    )
    if not ok:
        return _render()
    notifications.success("Affectation clôturée avec succès")
    return _back()


@bp.route("/affectations/<int:ref_affectation>/delete", methods=["POST"])
def delete(ref_affectation: int):
    ok, _ = attempt(
        "Erreur lors de la suppression de l'affectation",
        lambda: affectations_api.delete_affectation(client(), ref_affectation),
    )
    if not ok:
        return _render()
    notifications.success("Affectation supprimée avec succès")
    return _back()
