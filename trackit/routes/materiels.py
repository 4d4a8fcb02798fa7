"""Equipment inventory page."""
from __future__ import annotations

from flask import Blueprint, current_app, redirect, render_template, request, url_for

from .. import notifications
from ..api import affectations as affectations_api
from ..api import materiels as materiels_api
from ..api import personnes as personnes_api
from ..api import positions as positions_api
from ..forms import AffectationForm, BulkMaterielForm, MaterielForm
from ..listing import MATERIELS, count_by
from ..models.materiel import UNCATEGORISED_LABEL
from ..models.position import OCCUPATION_LIBRE
from .common import attempt, build_list, choices, client, fetch, find, requested_modal

bp = Blueprint("materiels", __name__)

MODALS = {"add", "bulk", "view", "edit", "delete", "assign", "close", "barcode"}
RECORD_MODALS = MODALS - {"add", "bulk"}


def _load():
    api_client = client()
    return (
        materiels_api.list_materiels(api_client),
        materiels_api.count_materiels(api_client),
        materiels_api.count_by_statut(api_client),
    )


def _assignment_choices(form: AffectationForm, num_serie: str) -> None:
    api_client = client()
    personnes = personnes_api.list_personnes(api_client)
    positions = positions_api.list_positions(api_client)
    form.matricule.choices = choices(
        personnes, lambda p: p.matricule, lambda p: f"{p.matricule} - {p.full_name}", "Sélectionner une personne"
    )
    form.ref_position.choices = choices(
        [position for position in positions if position.occupation == OCCUPATION_LIBRE],
        lambda p: p.ref_position,
        lambda p: f"{p.ref_position} - {p.design_position}",
        "Sélectionner une position",
    )
    form.num_serie.choices = [(num_serie, num_serie)]


def _render(modal=None, selected_id=None, form=None, bulk_form=None, assign_form=None, status=200):
    fetched = fetch("Erreur lors du chargement", _load, ([], 0, {}))
    materiels, total, by_status = fetched.data

    modal = modal or requested_modal(MODALS)
    selected = find(materiels, "num_serie", selected_id or request.args.get("id"))
    if modal in RECORD_MODALS and selected is None:
        modal = None

    barcode = None
    if modal == "add" and form is None:
        form = MaterielForm(formdata=None)
    elif modal == "edit" and form is None:
        form = MaterielForm(formdata=None, obj=selected)
    elif modal == "bulk" and bulk_form is None:
        bulk_form = BulkMaterielForm(formdata=None)
    elif modal == "assign":
        if assign_form is None:
            assign_form = AffectationForm(formdata=None, num_serie=selected.num_serie)
            loaded = fetch(
                "Erreur lors du chargement des personnes et positions",
                lambda: _assignment_choices(assign_form, selected.num_serie),
                None,
            )
            if loaded.failed:
                modal = None
    elif modal == "barcode":
        loaded = fetch(
            "Erreur lors de la génération du code-barres",
            lambda: materiels_api.generate_barcode(client(), selected.num_serie),
            None,
        )
        barcode = loaded.data
        if loaded.failed:
            modal = None

    html = render_template(
        "materiels/index.html",
        list=build_list(MATERIELS, materiels, fetched.error),
        total=total,
        by_status=by_status,
        by_category=count_by(materiels, lambda m: m.categorie.strip() or UNCATEGORISED_LABEL),
        modal=modal,
        selected=selected,
        form=form,
        bulk_form=bulk_form,
        assign_form=assign_form,
        barcode=barcode,
    )
    return html, status


def _back():
    return redirect(url_for("materiels.index", **request.args.to_dict()))


@bp.route("/equipment")
def index():
    return _render()


@bp.route("/equipment/add", methods=["POST"])
def add():
    form = MaterielForm()
    if not form.validate_on_submit():
        return _render("add", form=form, status=400)
    materiel = form.to_materiel()
    ok, _ = attempt("Erreur lors de l'ajout", lambda: materiels_api.create_materiel(client(), materiel))
    if not ok:
        return _render("add", form=form)
    current_app.logger.info("Materiel %s created", materiel.num_serie)
    notifications.success("Matériel ajouté avec succès", f"Le matériel {materiel.num_serie} a été ajouté.")
    return _back()


@bp.route("/equipment/bulk", methods=["POST"])
def bulk_add():
    form = BulkMaterielForm()
    if not form.validate_on_submit():
        return _render("bulk", bulk_form=form, status=400)
    materiels = form.to_materiels()
    ok, result = attempt("Erreur lors de l'ajout", lambda: materiels_api.bulk_add_materiels(client(), materiels))
    if not ok:
        return _render("bulk", bulk_form=form)
    current_app.logger.info("Bulk insert: %s inserted, %s skipped", result.inserted, result.skipped)
    message = f"{result.inserted} matériel(s) ajouté(s)"
    if result.skipped:
        message += f", {result.skipped} ignoré(s) car déjà existant(s)"
    notifications.success("Ajout en lot terminé", f"{message}.")
    return _back()


@bp.route("/equipment/<path:num_serie>/edit", methods=["POST"])
def edit(num_serie: str):
    form = MaterielForm()
    if not form.validate_on_submit():
        return _render("edit", num_serie, form=form, status=400)
    materiel = form.to_materiel()
    materiel.num_serie = num_serie
    ok, _ = attempt(
        "Erreur lors de la modification",
        lambda: materiels_api.update_materiel(client(), num_serie, materiel),
    )
    if not ok:
        return _render("edit", num_serie, form=form)
    notifications.success("Matériel modifié avec succès", f"Le matériel {num_serie} a été mis à jour.")
    return _back()


@bp.route("/equipment/<path:num_serie>/delete", methods=["POST"])
def delete(num_serie: str):
    ok, _ = attempt("Erreur lors de la suppression", lambda: materiels_api.delete_materiel(client(), num_serie))
    if not ok:
        return _render()
    current_app.logger.info("Materiel %s deleted", num_serie)
    notifications.success("Matériel supprimé avec succès", f"Le matériel {num_serie} a été supprimé.")
    return _back()


@bp.route("/equipment/<path:num_serie>/assign", methods=["POST"])
def assign(num_serie: str):
    form = AffectationForm()
    loaded = fetch(
        "Erreur lors du chargement des personnes et positions",
        lambda: _assignment_choices(form, num_serie),
        None,
    )
    if loaded.failed:
        return _render()
    if not form.validate_on_submit():
        return _render("assign", num_serie, assign_form=form, status=400)
    ok, _ = attempt(
        "Erreur lors de l'affectation",
        lambda: affectations_api.create_affectation(
            client(),
            matricule=form.matricule.data,
            ref_position=form.ref_position.data,
            num_serie=num_serie,
        ),
    )
    if not ok:
        return _render("assign", num_serie, assign_form=form)
    notifications.success("Matériel affecté avec succès", f"Le matériel {num_serie} a été affecté.")
    return _back()


@bp.route("/equipment/<path:num_serie>/close", methods=["POST"])
def close_assignment(num_serie: str):
    ref = request.form.get("ref_affectation", type=int)
    if ref is None:
        notifications.error("Erreur lors de la clôture", "Ce matériel n'a pas d'affectation active.")
        return _back()
    ok, _ = attempt(
        "Erreur lors de la clôture",
        lambda: affectations_api.close_affectation(client(), ref, num_serie),
    )
    if not ok:
        return _render()
    notifications.success("Affectation clôturée avec succès", f"L'affectation {ref} a été clôturée.")
    return _back()
