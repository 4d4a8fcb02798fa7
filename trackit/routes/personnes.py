"""Staff directory and equipment assignment to a person."""
from __future__ import annotations

from flask import Blueprint, current_app, redirect, render_template, request, url_for

from .. import notifications
from ..api import affectations as affectations_api
from ..api import materiels as materiels_api
from ..api import personnes as personnes_api
from ..api import positions as positions_api
from ..api.client import ApiError
from ..forms import AffecterMaterielForm, PersonneForm, PersonneImportForm
from ..listing import PERSONNES, unique_values
from ..models.position import OCCUPATION_LIBRE
from .common import attempt, build_list, choices, client, fetch, find, requested_modal

bp = Blueprint("personnes", __name__)

MODALS = {"add", "view", "edit", "delete", "assign", "import"}


def _assignment_options(form: AffecterMaterielForm):
    """Fill the position and equipment selects; return the available equipment."""
    api_client = client()
    positions = positions_api.list_positions(api_client)
    available = [m for m in materiels_api.list_materiels(api_client) if m.is_available]
    form.ref_position.choices = choices(
        [position for position in positions if position.occupation == OCCUPATION_LIBRE],
        lambda p: p.ref_position,
        lambda p: f"{p.ref_position} - {p.design_position}",
        "Sélectionner une position",
    )
    serials = choices(available, lambda m: m.num_serie, lambda m: m.label, "Sélectionnez un matériel")
    for row in form.rows:
        row.form.num_serie.choices = serials
    return available


def _render(modal=None, selected_id=None, form=None, assign_form=None, available=None, import_form=None, status=200):
    fetched = fetch(
        "Erreur lors du chargement du personnel",
        lambda: personnes_api.list_personnes(client()),
        [],
    )
    personnes = fetched.data

    modal = modal or requested_modal(MODALS)
    selected = find(personnes, "matricule", selected_id or request.args.get("id"))
    if modal in {"view", "edit", "delete", "assign"} and selected is None:
        modal = None

    affectations = []
    if modal == "view":
        affectations = fetch(
            "Erreur lors du chargement des affectations",
            lambda: affectations_api.search_by_matricule(client(), selected.matricule),
            [],
        ).data
    elif modal == "add" and form is None:
        form = PersonneForm(formdata=None)
    elif modal == "edit" and form is None:
        form = PersonneForm(formdata=None, obj=selected)
    elif modal == "assign" and assign_form is None:
        assign_form = AffecterMaterielForm(formdata=None)
        loaded = fetch(
            "Erreur lors du chargement des matériels disponibles",
            lambda: _assignment_options(assign_form),
            [],
        )
        if loaded.failed:
            modal = None
        available = loaded.data
    elif modal == "import" and import_form is None:
        import_form = PersonneImportForm(formdata=None)

    html = render_template(
        "personnes/index.html",
        list=build_list(PERSONNES, personnes, fetched.error),
        postes=unique_values(personnes, "poste"),
        projets=unique_values(personnes, "projet"),
        modal=modal,
        selected=selected,
        affectations=affectations,
        form=form,
        assign_form=assign_form,
        available=available or [],
        import_form=import_form,
    )
    return html, status


def _back():
    return redirect(url_for("personnes.index"))


@bp.route("/personnes")
def index():
    return _render()


@bp.route("/personnes/add", methods=["POST"])
def add():
    form = PersonneForm()
    if not form.validate_on_submit():
        return _render("add", form=form, status=400)
    personne = form.to_personne()
    ok, _ = attempt("Erreur lors de l'ajout", lambda: personnes_api.create_personne(client(), personne))
    if not ok:
        return _render("add", form=form)
    current_app.logger.info("Personne %s created", personne.matricule)
    notifications.success("Personne ajoutée avec succès", f"{personne.full_name} a été ajouté(e).")
    return _back()


@bp.route("/personnes/import", methods=["POST"])
def import_file():
    form = PersonneImportForm()
    if not form.validate_on_submit():
        return _render("import", import_form=form, status=400)
    upload = form.file.data
    ok, message = attempt(
        "Erreur lors de l'import",
        lambda: personnes_api.import_personnes(client(), upload.filename, upload.stream, upload.mimetype),
    )
    if not ok:
        return _render("import", import_form=form)
    current_app.logger.info("Personnes imported from %s", upload.filename)
    notifications.success("Import réussi", message)
    return _back()


@bp.route("/personnes/<matricule>/edit", methods=["POST"])
def edit(matricule: str):
    form = PersonneForm()
    if not form.validate_on_submit():
        return _render("edit", matricule, form=form, status=400)
    personne = form.to_personne()
    personne.matricule = matricule
    ok, _ = attempt(
        "Erreur lors de la modification",
        lambda: personnes_api.update_personne(client(), matricule, personne),
    )
    if not ok:
        return _render("edit", matricule, form=form)
    notifications.success("Personne modifiée avec succès")
    return _back()


@bp.route("/personnes/<matricule>/delete", methods=["POST"])
def delete(matricule: str):
    ok, _ = attempt("Erreur lors de la suppression", lambda: personnes_api.delete_personne(client(), matricule))
    if not ok:
        return _render()
    notifications.success("Personne supprimée avec succès")
    return _back()


@bp.route("/personnes/<matricule>/assign", methods=["POST"])
def assign(matricule: str):
    """Create one assignment per selected item, all at the chosen position."""
    form = AffecterMaterielForm()
    loaded = fetch("Erreur lors du chargement des matériels disponibles", lambda: _assignment_options(form), [])
    if loaded.failed:
        return _render()
    if not form.validate_on_submit():
        return _render("assign", matricule, assign_form=form, available=loaded.data, status=400)

    by_serial = {materiel.num_serie: materiel for materiel in loaded.data}
    serials = form.selected_serials()
    invalid = [
        row.form.num_serie.data
        for row in form.rows
        if by_serial.get(row.form.num_serie.data) is None
        or by_serial[row.form.num_serie.data].categorie != row.form.categorie.data
    ]
    if invalid or len(set(serials)) != len(serials):
        notifications.error(
            "Erreur lors de l'affectation",
            "Chaque ligne doit désigner un matériel disponible différent de la catégorie choisie.",
        )
        return _render("assign", matricule, assign_form=form, available=loaded.data, status=400)

    api_client = client()
    assigned = []
    for num_serie in serials:
        try:
            affectations_api.create_affectation(
                api_client, matricule=matricule, ref_position=form.ref_position.data, num_serie=num_serie
            )
        except ApiError as exc:
            if exc.is_unauthorized:
                raise
            current_app.logger.warning("Assignment of %s to %s failed: %s", num_serie, matricule, exc.message)
            notifications.error("Erreur lors de l'affectation", f"{num_serie} : {exc.message}")
            break
        assigned.append(num_serie)
    if assigned:
        notifications.success("Matériel affecté avec succès", f"{len(assigned)} matériel(s) affecté(s) à {matricule}.")
    if len(assigned) < len(serials):
        return _render("assign", matricule, assign_form=form, available=loaded.data)
    return _back()
