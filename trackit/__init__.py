import os

import click
from flask import Flask, redirect, render_template, url_for
from flask.cli import with_appcontext

from config import Config, _normalise_prefix

from .api.client import ApiError, SESSION_EXPIRED_MESSAGE
from .extensions import api, csrf
from .logging_config import configure_logging


def create_app(config_class: type[Config] = Config) -> Flask:
    app = Flask(__name__, static_folder=None)
    app.config.from_object(config_class)

    if not app.testing:
        configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    url_prefix = _normalise_prefix(app.config.get("URL_PREFIX", ""))
    app.config["URL_PREFIX"] = url_prefix

    static_folder = os.path.join(app.root_path, "static")
    app.static_folder = static_folder

    static_url_path = f"{url_prefix}/static" if url_prefix else "/static"
    app.static_url_path = static_url_path
    app.add_url_rule(
        f"{static_url_path}/<path:filename>",
        endpoint="static",
        view_func=app.send_static_file,
    )

    if url_prefix:
        app.add_url_rule(
            "/static/<path:filename>",
            endpoint="static_without_prefix",
            view_func=app.send_static_file,
        )

    csrf.init_app(app)
    api.init_app(app)

    from .routes import BLUEPRINTS

    for blueprint in BLUEPRINTS:
        app.register_blueprint(blueprint, url_prefix=url_prefix or None)

    _register_request_hooks(app)
    _register_error_handlers(app)
    _register_commands(app)

    app.logger.debug("TrackIT console ready, backend at %s", app.config["TRACKIT_API_URL"])
    return app


def _register_request_hooks(app: Flask) -> None:
    from . import auth, notifications
    from .navigation import sidebar_for

    app.before_request(auth.guard)

    @app.context_processor
    def inject_layout() -> dict:
        user = auth.current_user()
        items, groups = sidebar_for(user)
        return {
            "current_user": user,
            "nav_items": items,
            "nav_groups": groups,
            "pop_toasts": notifications.pop_toasts,
            "toast_duration_ms": app.config.get("TOAST_DURATION_MS", 5000),
        }


def _register_error_handlers(app: Flask) -> None:
    from . import auth, notifications

    @app.errorhandler(ApiError)
    def handle_api_error(exc: ApiError):
        if exc.is_unauthorized:
            app.logger.info("Backend rejected the session token, signing out")
            auth.logout_user()
            notifications.error("Session expirée", SESSION_EXPIRED_MESSAGE)
            return redirect(url_for("auth.login"))
        app.logger.error("Unhandled backend failure (%s, HTTP %s): %s", exc.kind, exc.status, exc.message)
        return render_template("errors/api.html", error=exc), 502

    @app.errorhandler(403)
    def forbidden(_exc):
        return render_template("errors/403.html"), 403

    @app.errorhandler(404)
    def not_found(_exc):
        return render_template("errors/404.html"), 404


def _register_commands(app: Flask) -> None:
    @app.cli.command("ping-api")
    @with_appcontext
    def ping_api() -> None:
        """Check that the TrackIT backend answers."""
        from .api import dashboard

        try:
            stats = dashboard.get_stats(api.client)
        except ApiError as exc:
            raise click.ClickException(f"{app.config['TRACKIT_API_URL']}: {exc.message}") from exc
        click.echo(
            f"{app.config['TRACKIT_API_URL']} OK - {stats.total_materiels} matériel(s), "
            f"{stats.open_incidents} incident(s) ouvert(s)."
        )
