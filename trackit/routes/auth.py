"""Login and logout."""
from __future__ import annotations

from flask import Blueprint, current_app, redirect, render_template, request, url_for

from .. import auth, notifications
from ..api import auth as auth_api
from ..api.client import ApiError
from ..extensions import api
from ..forms import LoginForm
from .common import client

bp = Blueprint("auth", __name__)


@bp.route("/", methods=["GET", "POST"])
def login():
    if auth.is_authenticated():
        return redirect(url_for("main.dashboard"))

    form = LoginForm()
    if form.validate_on_submit():
        identifier = form.identifier.data.strip()
        try:
            result = auth_api.login(client(), identifier, form.password.data)
        except ApiError as exc:
            current_app.logger.info("Login refused for %s: %s", identifier, exc.message)
            notifications.error("Connexion impossible", exc.message)
        else:
            auth.login_user(result.user, result.token)
            api.reset()
            current_app.logger.info("User %s signed in", result.user.nom_user)
            notifications.success("Connexion réussie", f"Bienvenue {result.user.display_name}")
            return redirect(auth.safe_next_url(request.args.get("next")) or url_for("main.dashboard"))

    return render_template("auth/login.html", form=form)


@bp.route("/logout", methods=["POST"])
def logout():
    auth_api.logout(client())
    auth.logout_user()
    api.reset()
    notifications.info("Déconnexion", "Vous avez été déconnecté.")
    return redirect(url_for("auth.login"))
