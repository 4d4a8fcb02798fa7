from __future__ import annotations

from datetime import date

from flask_wtf import FlaskForm
from flask_wtf.file import FileAllowed, FileField, FileRequired
from wtforms import (
    BooleanField,
    DateField,
    FieldList,
    Form,
    FormField,
    HiddenField,
    PasswordField,
    SelectField,
    StringField,
    SubmitField,
    TextAreaField,
)
from wtforms.validators import DataRequired, Email, EqualTo, Length, Optional, ValidationError

from .models import Materiel, Personne, Position, Salle, UniteCentrale
from .models.base import optional_int
from .models.incident import STATUT_CHOICES, TYPE_CHOICES
from .models.materiel import CATEGORY_CHOICES, COMPUTER_CATEGORIES, STATUS_CHOICES, STATUS_DISPONIBLE
from .models.personne import POSTE_CHOICES, PROJET_CHOICES
from .models.position import OCCUPATION_CHOICES, OCCUPATION_LIBRE
from .models.utilisateur import ROLE_CHOICES, ROLE_RESPONSABLE


MIN_PASSWORD_LENGTH = 6
IMPORT_EXTENSIONS = ("xlsx", "xls")


def _choices(values, placeholder: str | None = None) -> list[tuple[str, str]]:
    choices = [(value, value) for value in values]
    if placeholder is not None:
        choices.insert(0, ("", placeholder))
    return choices


def _text(field) -> str:
    return (field.data or "").strip()


class LoginForm(FlaskForm):
    identifier = StringField("Email ou nom d'utilisateur", validators=[DataRequired(), Length(max=120)])
    password = PasswordField("Mot de passe", validators=[DataRequired()])
    submit = SubmitField("Se connecter")


class UniteCentraleForm(Form):
    nom_pc = StringField("Nom du PC", validators=[Optional(), Length(max=100)])
    systeme_exploitation = StringField("Système d'exploitation", validators=[Optional(), Length(max=100)])
    ram = StringField("RAM", validators=[Optional(), Length(max=50)])
    disque = StringField("Disque", validators=[Optional(), Length(max=50)])
    processeur = StringField("Processeur", validators=[Optional(), Length(max=100)])

    def to_unite_centrale(self) -> UniteCentrale | None:
        values = {name: _text(self[name]) for name in self._fields}
        if not any(values.values()):
            return None
        return UniteCentrale(**values)


class MaterielForm(FlaskForm):
    num_serie = StringField("Numéro de série", validators=[DataRequired(), Length(max=100)])
    marque = StringField("Marque", validators=[DataRequired(), Length(max=100)])
    modele = StringField("Modèle", validators=[DataRequired(), Length(max=100)])
    categorie = SelectField(
        "Catégorie",
        choices=_choices(CATEGORY_CHOICES, "Sélectionner une catégorie"),
        validators=[DataRequired()],
    )
    status = SelectField("Statut", choices=_choices(STATUS_CHOICES), default=STATUS_DISPONIBLE)
    date_ajout = DateField("Date d'ajout", validators=[Optional()], default=date.today)
    uc = FormField(UniteCentraleForm, label="Unité centrale")
    submit = SubmitField("Enregistrer")

    @property
    def needs_specs(self) -> bool:
        return self.categorie.data in COMPUTER_CATEGORIES

    def to_materiel(self) -> Materiel:
        return Materiel(
            num_serie=_text(self.num_serie),
            marque=_text(self.marque),
            modele=_text(self.modele),
            categorie=self.categorie.data,
            status=self.status.data or STATUS_DISPONIBLE,
            date_ajout=self.date_ajout.data or date.today(),
            uc=self.uc.form.to_unite_centrale() if self.needs_specs else None,
        )


class BulkMaterielRowForm(Form):
    num_serie = StringField("Numéro de série", validators=[DataRequired(), Length(max=100)])
    marque = StringField("Marque", validators=[DataRequired(), Length(max=100)])
    modele = StringField("Modèle", validators=[DataRequired(), Length(max=100)])


class BulkMaterielForm(FlaskForm):
    """Several items of the same category, status and arrival date."""

    categorie = SelectField(
        "Catégorie",
        choices=_choices(CATEGORY_CHOICES, "Sélectionner une catégorie"),
        validators=[DataRequired()],
    )
    status = SelectField("Statut", choices=_choices(STATUS_CHOICES), default=STATUS_DISPONIBLE)
    date_ajout = DateField("Date d'ajout", validators=[Optional()], default=date.today)
    rows = FieldList(FormField(BulkMaterielRowForm), min_entries=1)
    submit = SubmitField("Ajouter les matériels")

    def to_materiels(self) -> list[Materiel]:
        added = self.date_ajout.data or date.today()
        return [
            Materiel(
                num_serie=_text(row.form.num_serie),
                marque=_text(row.form.marque),
                modele=_text(row.form.modele),
                categorie=self.categorie.data,
                status=self.status.data or STATUS_DISPONIBLE,
                date_ajout=added,
            )
            for row in self.rows
        ]


class IncidentForm(FlaskForm):
    type_incident = SelectField(
        "Type d'incident",
        choices=_choices(TYPE_CHOICES, "Sélectionner un type"),
        validators=[DataRequired()],
    )
    date_inc = DateField("Date de l'incident", validators=[DataRequired()], default=date.today)
    ref_inventaire = StringField("Référence inventaire", validators=[DataRequired(), Length(max=20)])
    matricule = StringField("Matricule", validators=[DataRequired(), Length(max=50)])
    num_serie = StringField("Numéro de série", validators=[DataRequired(), Length(max=100)])
    description = TextAreaField("Description", validators=[Optional(), Length(max=500)])
    submit = SubmitField("Signaler l'incident")


class IncidentUpdateForm(FlaskForm):
    statut_incident = SelectField("Statut", choices=_choices(STATUT_CHOICES), validators=[DataRequired()])
    description = TextAreaField("Description", validators=[Optional(), Length(max=500)])
    submit = SubmitField("Mettre à jour")


class InventaireCheckRowForm(Form):
    categorie = HiddenField()
    count = HiddenField()
    confirmed = BooleanField("Présent")


class InventaireStartForm(FlaskForm):
    """Room to count, plus one row per equipment category to tick off."""

    ref_salle = SelectField("Salle", choices=[], validators=[DataRequired()])
    observation = TextAreaField("Observation", validators=[Optional(), Length(max=500)])
    rows = FieldList(FormField(InventaireCheckRowForm))
    submit = SubmitField("Valider l'inventaire")

    def unconfirmed(self) -> list[tuple[str, int]]:
        return [
            (row.form.categorie.data, optional_int(row.form.count.data) or 0)
            for row in self.rows
            if not row.form.confirmed.data
        ]


class InventaireValidateForm(FlaskForm):
    observation = TextAreaField("Observation", validators=[Optional(), Length(max=500)])
    submit = SubmitField("Valider l'inventaire")


class SalleForm(FlaskForm):
    ref_salle = StringField("Référence", validators=[DataRequired(), Length(max=50)])
    nom_salle = StringField("Nom", validators=[DataRequired(), Length(max=100)])
    etage = StringField("Étage", validators=[DataRequired(), Length(max=20)])
    site = StringField("Site", validators=[DataRequired(), Length(max=100)])
    submit = SubmitField("Enregistrer")

    def to_salle(self) -> Salle:
        return Salle(
            ref_salle=_text(self.ref_salle),
            nom_salle=_text(self.nom_salle),
            etage=_text(self.etage),
            site=_text(self.site),
        )


class PositionForm(FlaskForm):
    ref_position = StringField("Référence", validators=[DataRequired(), Length(max=50)])
    design_position = StringField("Désignation", validators=[DataRequired(), Length(max=100)])
    port = StringField("Port", validators=[DataRequired(), Length(max=50)])
    occupation = SelectField("Occupation", choices=_choices(OCCUPATION_CHOICES), default=OCCUPATION_LIBRE)
    ref_salle = SelectField("Salle", choices=[], validators=[DataRequired()])
    submit = SubmitField("Enregistrer")

    def to_position(self) -> Position:
        return Position(
            ref_position=_text(self.ref_position),
            design_position=_text(self.design_position),
            port=_text(self.port),
            occupation=self.occupation.data or OCCUPATION_LIBRE,
            ref_salle=self.ref_salle.data,
        )


class BulkPositionRowForm(Form):
    ref_position = StringField("Référence", validators=[Optional(), Length(max=50)])
    design_position = StringField("Désignation", validators=[Optional(), Length(max=100)])
    port = StringField("Port", validators=[Optional(), Length(max=50)])
    occupation = SelectField("Occupation", choices=_choices(OCCUPATION_CHOICES), default=OCCUPATION_LIBRE)
    ref_salle = StringField("Salle", validators=[Optional(), Length(max=50)])

    @property
    def is_complete(self) -> bool:
        return all(_text(self[name]) for name in ("ref_position", "design_position", "port", "ref_salle"))


class BulkPositionForm(FlaskForm):
    """Rows missing a reference, designation, port or room are ignored."""

    rows = FieldList(FormField(BulkPositionRowForm), min_entries=1)
    submit = SubmitField("Ajouter les positions")

    def validate_rows(self, field) -> None:
        if not any(row.form.is_complete for row in field):
            raise ValidationError("Renseignez au moins une position complète.")

    def to_positions(self) -> list[Position]:
        return [
            Position(
                ref_position=_text(row.form.ref_position),
                design_position=_text(row.form.design_position),
                port=_text(row.form.port),
                occupation=row.form.occupation.data or OCCUPATION_LIBRE,
                ref_salle=_text(row.form.ref_salle),
            )
            for row in self.rows
            if row.form.is_complete
        ]


class AffectationForm(FlaskForm):
    matricule = SelectField("Personne", choices=[], validators=[DataRequired()])
    ref_position = SelectField("Position", choices=[], validators=[DataRequired()])
    num_serie = SelectField("Matériel", choices=[], validators=[DataRequired()])
    submit = SubmitField("Affecter")


class AffectationEditForm(FlaskForm):
    """Hand an assignment over to another person, or move it to another position."""

    matricule = SelectField("Matricule (Personne)", choices=[], validators=[Optional()])
    ref_position = SelectField("Référence Position", choices=[], validators=[Optional()])
    submit = SubmitField("Mettre à jour")

    def validate(self, extra_validators=None) -> bool:
        if not super().validate(extra_validators):
            return False
        if bool(self.matricule.data) == bool(self.ref_position.data):
            self.form_errors.append("Soit matricule soit refPosition doit être fourni, mais pas les deux.")
            return False
        return True


class AffectationSearchForm(FlaskForm):
    class Meta:
        csrf = False

    start_date = DateField("Du", validators=[Optional()])
    end_date = DateField("Au", validators=[Optional()])
    matricule = StringField("Matricule", validators=[Optional(), Length(max=50)])
    ref_position = StringField("Position", validators=[Optional(), Length(max=50)])
    submit = SubmitField("Rechercher")

    def validate_end_date(self, field) -> None:
        if field.data and self.start_date.data and field.data < self.start_date.data:
            raise ValidationError("La date de fin doit être postérieure à la date de début.")

    @property
    def has_criteria(self) -> bool:
        has_range = bool(self.start_date.data and self.end_date.data)
        return has_range or bool(_text(self.matricule) or _text(self.ref_position))


class PersonneForm(FlaskForm):
    matricule = StringField("Matricule", validators=[DataRequired(), Length(max=50)])
    nom = StringField("Nom", validators=[DataRequired(), Length(max=100)])
    prenom = StringField("Prénom", validators=[DataRequired(), Length(max=100)])
    tel = StringField("Téléphone", validators=[Optional(), Length(max=20)])
    email = StringField("Email", validators=[DataRequired(), Email(), Length(max=120)])
    poste = SelectField("Poste", choices=_choices(POSTE_CHOICES, "Sélectionnez un poste"), validators=[Optional()])
    projet = SelectField("Projet", choices=_choices(PROJET_CHOICES, "Sélectionnez un projet"), validators=[Optional()])
    submit = SubmitField("Enregistrer")

    def to_personne(self) -> Personne:
        return Personne(
            matricule=_text(self.matricule),
            nom=_text(self.nom),
            prenom=_text(self.prenom),
            tel=_text(self.tel),
            email=_text(self.email),
            poste=self.poste.data or "",
            projet=self.projet.data or "",
        )


class PersonneImportForm(FlaskForm):
    file = FileField(
        "Fichier Excel",
        validators=[
            FileRequired("Veuillez sélectionner un fichier Excel"),
            FileAllowed(IMPORT_EXTENSIONS, "Veuillez sélectionner un fichier Excel (.xlsx ou .xls)"),
        ],
    )
    submit = SubmitField("Importer")


class AffecterMaterielRowForm(Form):
    categorie = SelectField("Catégorie", choices=_choices(CATEGORY_CHOICES, "Sélectionnez une catégorie"),
                            validators=[DataRequired()])
    num_serie = SelectField("Matériel", choices=[], validators=[DataRequired()], validate_choice=False)


class AffecterMaterielForm(FlaskForm):
    """Assign one or more available items to a person at a position."""

    ref_position = SelectField("Position", choices=[], validators=[DataRequired()])
    rows = FieldList(FormField(AffecterMaterielRowForm), min_entries=1)
    submit = SubmitField("Affecter")

    def selected_serials(self) -> list[str]:
        return [row.form.num_serie.data for row in self.rows]


class UtilisateurForm(FlaskForm):
    matricule = StringField("Matricule", validators=[DataRequired(), Length(max=50)])
    nom = StringField("Nom", validators=[DataRequired(), Length(max=100)])
    prenom = StringField("Prénom", validators=[DataRequired(), Length(max=100)])
    email = StringField("Email", validators=[DataRequired(), Email(), Length(max=120)])
    poste = SelectField("Poste", choices=_choices(POSTE_CHOICES, "Sélectionnez un poste"), validators=[Optional()])
    projet = SelectField("Projet", choices=_choices(PROJET_CHOICES, "Sélectionnez un projet"), validators=[Optional()])
    nom_user = StringField("Nom d'utilisateur", validators=[DataRequired(), Length(max=100)])
    role = SelectField("Rôle", choices=_choices(ROLE_CHOICES), default=ROLE_RESPONSABLE)
    password = PasswordField("Mot de passe")
    submit = SubmitField("Enregistrer")

    def __init__(self, *args, require_password: bool = False, current_role: str | None = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.require_password = require_password
        # Legacy spellings such as "admin" stay selectable for the account holding them.
        if current_role and current_role not in ROLE_CHOICES:
            self.role.choices = _choices(ROLE_CHOICES) + [(current_role, current_role)]

    def validate_password(self, field) -> None:
        if not field.data:
            if self.require_password:
                raise ValidationError("Le mot de passe est requis.")
            return
        if len(field.data) < MIN_PASSWORD_LENGTH:
            raise ValidationError("Au moins 6 caractères.")

    def to_personne(self) -> Personne:
        return Personne(
            matricule=_text(self.matricule),
            nom=_text(self.nom),
            prenom=_text(self.prenom),
            email=_text(self.email),
            poste=self.poste.data or "",
            projet=self.projet.data or "",
        )


class ProfileForm(FlaskForm):
    nom = StringField("Nom", validators=[DataRequired(), Length(max=100)])
    prenom = StringField("Prénom", validators=[DataRequired(), Length(max=100)])
    email = StringField("Email", validators=[DataRequired(), Email(), Length(max=120)])
    tel = StringField("Téléphone", validators=[Optional(), Length(max=20)])
    current_password = PasswordField("Mot de passe actuel")
    new_password = PasswordField(
        "Nouveau mot de passe",
        validators=[Optional(), Length(min=MIN_PASSWORD_LENGTH, message="Au moins 6 caractères.")],
    )
    confirm_password = PasswordField(
        "Confirmer le mot de passe",
        validators=[EqualTo("new_password", message="Les mots de passe ne correspondent pas.")],
    )
    submit = SubmitField("Enregistrer")

    def validate_current_password(self, field) -> None:
        if self.new_password.data and not field.data:
            raise ValidationError("Le mot de passe actuel est requis pour le changer.")

    @property
    def wants_password_change(self) -> bool:
        return bool(self.new_password.data)
