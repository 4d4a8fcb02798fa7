"""Incident reports."""
from __future__ import annotations

from flask import Blueprint, current_app, redirect, render_template, request, url_for

from .. import notifications
from ..api import incidents as incidents_api
from ..auth import current_user
from ..forms import IncidentForm, IncidentUpdateForm
from ..listing import INCIDENTS, count_by
from ..models.incident import STATUT_CHOICES, STATUT_EN_COURS, STATUT_OUVERT, TYPE_CHOICES
from .common import attempt, build_list, client, fetch, find, requested_modal

bp = Blueprint("incidents", __name__)

MODALS = {"add", "view", "edit", "delete"}


def _render(modal=None, selected_id=None, form=None, status=200):
    fetched = fetch(
        "Erreur lors du chargement des incidents",
        lambda: incidents_api.list_incidents(client()),
        [],
    )
    incidents = fetched.data

    modal = modal or requested_modal(MODALS)
    selected = find(incidents, "ref_incident", selected_id or request.args.get("id"))
    if modal in {"view", "edit", "delete"} and selected is None:
        modal = None

    if modal == "add" and form is None:
        # A stock-take anomaly lands here with its reference and a description.
        user = current_user()
        form = IncidentForm(
            formdata=None,
            ref_inventaire=request.args.get("ref_inventaire", ""),
            description=request.args.get("description", ""),
            matricule=user.matricule if user else "",
        )
    elif modal == "edit" and form is None:
        form = IncidentUpdateForm(formdata=None, obj=selected)

    html = render_template(
        "incidents/index.html",
        list=build_list(INCIDENTS, incidents, fetched.error),
        by_statut=count_by(incidents, "statut_incident"),
        by_type=count_by(incidents, "type_incident"),
        statut_choices=STATUT_CHOICES,
        type_choices=TYPE_CHOICES,
        modal=modal,
        selected=selected,
        form=form,
    )
    return html, status


def _back(**args):
    return redirect(url_for("incidents.index", **args))


@bp.route("/incidents")
def index():
    return _render()


@bp.route("/incidents/add", methods=["POST"])
def add():
    form = IncidentForm()
    if not form.validate_on_submit():
        return _render("add", form=form, status=400)
    ok, _ = attempt(
        "Erreur lors de la création de l'incident",
        lambda: incidents_api.create_incident(
            client(),
            type_incident=form.type_incident.data,
            date_inc=form.date_inc.data,
            ref_inventaire=form.ref_inventaire.data.strip(),
            matricule=form.matricule.data.strip(),
            num_serie=form.num_serie.data.strip(),
            description=(form.description.data or "").strip(),
        ),
    )
    if not ok:
        return _render("add", form=form)
    current_app.logger.info("Incident reported on %s", form.num_serie.data)
    notifications.success("Incident signalé avec succès")
    return _back()


@bp.route("/incidents/<int:ref_incident>/consult", methods=["POST"])
def consult(ref_incident: int):
    """Open the detail view; an incident still ``Ouvert`` moves to ``En cours``."""
    if request.form.get("statut_incident") == STATUT_OUVERT:
        ok, _ = attempt(
            "Erreur lors de la mise à jour de l'incident",
            lambda: incidents_api.update_incident(
                client(),
                ref_incident,
                statut_incident=STATUT_EN_COURS,
                description=request.form.get("description", ""),
            ),
        )
        if ok:
            current_app.logger.info("Incident %s taken in charge", ref_incident)
    return _back(modal="view", id=ref_incident)


@bp.route("/incidents/<int:ref_incident>/edit", methods=["POST"])
def edit(ref_incident: int):
    form = IncidentUpdateForm()
    if not form.validate_on_submit():
        return _render("edit", ref_incident, form=form, status=400)
    ok, _ = attempt(
        "Erreur lors de la mise à jour de l'incident",
        lambda: incidents_api.update_incident(
            client(),
            ref_incident,
            statut_incident=form.statut_incident.data,
            description=(form.description.data or "").strip(),
        ),
    )
    if not ok:
        return _render("edit", ref_incident, form=form)
    notifications.success("Incident mis à jour", f"L'incident {ref_incident} est maintenant « {form.statut_incident.data} ».")
    return _back()


@bp.route("/incidents/<int:ref_incident>/delete", methods=["POST"])
def delete(ref_incident: int):
    ok, _ = attempt(
        "Erreur lors de la suppression de l'incident",
        lambda: incidents_api.delete_incident(client(), ref_incident),
    )
    if not ok:
        return _render()
    notifications.success("Incident supprimé", f"L'incident {ref_incident} a été supprimé.")
    return _back()
