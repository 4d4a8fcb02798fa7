"""User accounts. Administrators only."""
from __future__ import annotations

from flask import Blueprint, current_app, redirect, render_template, request, url_for

from .. import notifications
from ..api import personnes as personnes_api
from ..api import utilisateurs as utilisateurs_api
from ..api.client import ApiError
from ..auth import admin_required, current_user
from ..forms import UtilisateurForm
from ..listing import UTILISATEURS, count_by
from ..models.utilisateur import ROLE_CHOICES
from .common import attempt, build_list, client, fetch, find, requested_modal

bp = Blueprint("utilisateurs", __name__)

MODALS = {"add", "view", "edit", "delete"}


def _render(modal=None, selected_id=None, form=None, status=200):
    fetched = fetch(
        "Erreur lors du chargement des utilisateurs",
        lambda: utilisateurs_api.list_utilisateurs(client()),
        [],
    )
    utilisateurs = fetched.data

    modal = modal or requested_modal(MODALS)
    selected = find(utilisateurs, "matricule", selected_id or request.args.get("id"))
    if modal in {"view", "edit", "delete"} and selected is None:
        modal = None

    if modal == "add" and form is None:
        form = UtilisateurForm(formdata=None, require_password=True)
    elif modal == "edit" and form is None:
        form = UtilisateurForm(formdata=None, obj=selected, current_role=selected.role)

    html = render_template(
        "utilisateurs/index.html",
        list=build_list(UTILISATEURS, utilisateurs, fetched.error),
        by_role=count_by(utilisateurs, "role"),
        role_choices=ROLE_CHOICES,
        modal=modal,
        selected=selected,
        form=form,
    )
    return html, status


def _back():
    return redirect(url_for("utilisateurs.index"))


def _create(form: UtilisateurForm) -> None:
    """Register the person first; an already known matricule is reused."""
    api_client = client()
    personne = form.to_personne()
    try:
        personnes_api.create_personne(api_client, personne)
    except ApiError as exc:
        if exc.status != 409:
            raise
        current_app.logger.info("Personne %s already exists, creating the account only", personne.matricule)
    utilisateurs_api.create_utilisateur(
        api_client,
        matricule=personne.matricule,
        nom_user=form.nom_user.data.strip(),
        password=form.password.data,
        role=form.role.data,
    )


def _update(matricule: str, form: UtilisateurForm) -> None:
    api_client = client()
    personne = form.to_personne()
    personne.matricule = matricule
    personnes_api.update_personne(api_client, matricule, personne)
    utilisateurs_api.update_utilisateur(
        api_client,
        matricule,
        nom_user=form.nom_user.data.strip(),
        role=form.role.data,
        password=form.password.data or None,
    )


@bp.route("/utilisateurs")
@admin_required
def index():
    return _render()


@bp.route("/utilisateurs/add", methods=["POST"])
@admin_required
def add():
    form = UtilisateurForm(require_password=True)
    if not form.validate_on_submit():
        return _render("add", form=form, status=400)
    ok, _ = attempt("Erreur lors de la création de l'utilisateur", lambda: _create(form))
    if not ok:
        return _render("add", form=form)
    current_app.logger.info("Utilisateur %s created with role %s", form.nom_user.data, form.role.data)
    notifications.success("Utilisateur créé avec succès", f"Le compte {form.nom_user.data.strip()} a été créé.")
    return _back()


@bp.route("/utilisateurs/<matricule>/edit", methods=["POST"])
@admin_required
def edit(matricule: str):
    loaded = fetch(
        "Erreur lors du chargement de l'utilisateur",
        lambda: utilisateurs_api.get_utilisateur(client(), matricule),
        None,
    )
    if loaded.failed:
        return _render()
    form = UtilisateurForm(current_role=loaded.data.role)
    if not form.validate_on_submit():
        return _render("edit", matricule, form=form, status=400)
    ok, _ = attempt("Erreur lors de la modification de l'utilisateur", lambda: _update(matricule, form))
    if not ok:
        return _render("edit", matricule, form=form)
    notifications.success("Utilisateur modifié avec succès")
    return _back()


@bp.route("/utilisateurs/<matricule>/delete", methods=["POST"])
@admin_required
def delete(matricule: str):
    user = current_user()
    if user is not None and user.matricule == matricule:
        notifications.error("Suppression impossible", "Vous ne pouvez pas supprimer votre propre compte.")
        return _back()
    ok, _ = attempt(
        "Erreur lors de la suppression de l'utilisateur",
        lambda: utilisateurs_api.delete_utilisateur(client(), matricule),
    )
    if not ok:
        return _render()
    notifications.success("Utilisateur supprimé avec succès")
    return _back()
