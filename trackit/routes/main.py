"""Dashboard and profile pages."""
from __future__ import annotations

from flask import Blueprint, current_app, redirect, render_template, url_for

from .. import auth, notifications
from ..api import auth as auth_api
from ..api import dashboard as dashboard_api
from ..api import personnes as personnes_api
from ..api import utilisateurs as utilisateurs_api
from ..api.client import ApiError
from ..forms import ProfileForm
from ..models import AuthenticatedUser, Personne
from .common import attempt, client, fetch

bp = Blueprint("main", __name__)

EVOLUTION_MONTHS = 6
DASHBOARD_ERROR = "Erreur lors du chargement des données du tableau de bord"


@bp.route("/dashboard")
def dashboard():
    def load():
        api_client = client()
        return (
            dashboard_api.get_stats(api_client),
            dashboard_api.get_recent_operations(api_client),
            dashboard_api.get_monthly_evolution(api_client),
        )

    fetched = fetch(DASHBOARD_ERROR, load, None)
    if fetched.failed:
        return render_template("dashboard.html", stats=None, operations=[], evolution=[], error=DASHBOARD_ERROR)

    stats, operations, evolution = fetched.data
    evolution = evolution[-EVOLUTION_MONTHS:]
    peak = max((month.total for month in evolution), default=0)
    return render_template(
        "dashboard.html",
        stats=stats,
        operations=operations,
        evolution=evolution,
        evolution_peak=peak,
        error=None,
    )


def _check_current_password(user: AuthenticatedUser, password: str) -> bool:
    try:
        auth_api.login(client(), user.nom_user, password)
    except ApiError as exc:
        if exc.status == 401:
            return False
        raise
    return True


@bp.route("/profile", methods=["GET", "POST"])
def profile():
    user = auth.current_user()
    fetched = fetch(
        "Chargement du profil impossible",
        lambda: personnes_api.get_personne(client(), user.matricule),
        Personne(matricule=user.matricule, nom=user.nom, prenom=user.prenom, email=user.email),
    )
    personne = fetched.data
    form = ProfileForm(obj=personne)

    if form.validate_on_submit():
        if form.wants_password_change:
            try:
                valid = _check_current_password(user, form.current_password.data)
            except ApiError as exc:
                notifications.api_error("Vérification du mot de passe impossible", exc)
                return render_template("profile.html", form=form, personne=personne, user=user)
            if not valid:
                form.current_password.errors.append("Mot de passe actuel incorrect.")
                notifications.error("Profil non modifié", "Mot de passe actuel incorrect.")
                return render_template("profile.html", form=form, personne=personne, user=user)

        updated = Personne(
            matricule=personne.matricule,
            nom=form.nom.data.strip(),
            prenom=form.prenom.data.strip(),
            tel=(form.tel.data or "").strip(),
            email=form.email.data.strip(),
            poste=personne.poste,
            projet=personne.projet,
        )
        ok, _ = attempt(
            "Mise à jour du profil impossible",
            lambda: personnes_api.update_personne(client(), personne.matricule, updated),
        )
        if ok and form.wants_password_change:
            ok, _ = attempt(
                "Changement de mot de passe impossible",
                lambda: utilisateurs_api.update_utilisateur(client(), user.matricule, password=form.new_password.data),
            )
        if ok:
            user.nom, user.prenom, user.email = updated.nom, updated.prenom, updated.email
            auth.login_user(user, auth.current_token())
            current_app.logger.info("Profile of %s updated", user.matricule)
            notifications.success("Profil mis à jour")
            return redirect(url_for("main.profile"))

    return render_template("profile.html", form=form, personne=personne, user=user)
