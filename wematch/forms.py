"""
Request validation forms (Flask-WTF).

Forms validate request shape before any service call: required fields,
type coercion, enum choices and lengths.  Field names match the wire
format (camelCase); ``payload()`` converts them to the snake_case keys
the services use.

Multipart bodies bind ``request.files``/``request.form`` through
Flask-WTF; JSON bodies on POST/PATCH are flattened by ``ApiForm``.
Listing forms are bound to ``request.args`` explicitly.  CSRF is off:
the API is authenticated with bearer tokens, not cookies.
"""

import re
from datetime import datetime

from flask import current_app, request
from flask_wtf import FlaskForm
from flask_wtf.file import FileField
from werkzeug.datastructures import ImmutableMultiDict
from wtforms import BooleanField, Field, IntegerField, PasswordField, SelectField, StringField
from wtforms.fields.core import UnboundField
from wtforms.validators import DataRequired, Length, Optional, Regexp
from wtforms.widgets import TextInput

from wematch.exceptions import ValidationError
from wematch.models.enums import (
    Category,
    ExperienceLevel,
    OpportunityType,
    PaymentType,
    UserRole,
    choices_for,
)
from wematch.services.query_service import OpportunityFilter, Pagination

_EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _strip(value):
    return value.strip() if isinstance(value, str) else value


def _snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def enum_coercer(enum_cls):
    """Build a SelectField ``coerce`` that accepts any letter case."""

    def coerce(value):
        if isinstance(value, enum_cls):
            return value
        return enum_cls(str(value).strip().upper())

    return coerce


def enum_field(enum_cls, required: bool = False, label: str | None = None) -> SelectField:
    first = DataRequired() if required else Optional()
    return SelectField(
        label,
        choices=choices_for(enum_cls),
        coerce=enum_coercer(enum_cls),
        validators=[first],
    )


class IsoDateTimeField(Field):
    """A datetime in ISO-8601 form; a trailing ``Z`` means UTC."""

    widget = TextInput()

    def _value(self):
        if self.raw_data:
            return " ".join(str(value) for value in self.raw_data)
        return self.data.isoformat() if self.data else ""

    def process_formdata(self, valuelist):
        if not valuelist or not str(valuelist[0]).strip():
            self.data = None
            return
        raw = str(valuelist[0]).strip()
        if raw.endswith(("Z", "z")):
            raw = raw[:-1] + "+00:00"
        try:
            self.data = datetime.fromisoformat(raw)
        except ValueError as exc:
            self.data = None
            raise ValueError(self.gettext("Not a valid ISO-8601 datetime.")) from exc


class ApiForm(FlaskForm):
    """
    Base form: no CSRF, raises ``ValidationError`` on failure.

    A JSON body is flattened into form data before binding.  Scalars are
    sent as their text form, ``null`` counts as absent (see
    ``sent_null``), and a body that is not an object, or a value that is
    an array or object, is rejected with a ``ValidationError``.
    """

    class Meta:
        csrf = False

    # Fields handled separately from the JSON-like payload.
    non_payload_fields: tuple[str, ...] = ()

    def __init__(self, *args, **kwargs):
        self._null_fields = frozenset()
        if not args and "formdata" not in kwargs and self._has_json_body():
            formdata, self._null_fields = self._json_formdata(request.get_json())
            kwargs["formdata"] = formdata
        super().__init__(*args, **kwargs)

    def _has_json_body(self) -> bool:
        return (
            self.is_submitted()
            and request.is_json
            and not request.files
            and not request.form
        )

    @classmethod
    def _json_formdata(cls, body) -> tuple[ImmutableMultiDict, frozenset]:
        if not isinstance(body, dict):
            raise ValidationError("The request body must be a JSON object.")

        items, nulls, errors = [], set(), {}
        for key, value in body.items():
            unbound = getattr(cls, key, None)
            if isinstance(unbound, UnboundField) and issubclass(unbound.field_class, FileField):
                errors[key] = ["Files must be sent as multipart/form-data."]
            elif value is None:
                nulls.add(key)
            elif isinstance(value, bool):
                items.append((key, "true" if value else "false"))
            elif isinstance(value, (str, int, float)):
                items.append((key, str(value)))
            else:
                errors[key] = ["Must be a string, number or boolean."]
        if errors:
            raise ValidationError("The request is invalid.", details=errors)
        return ImmutableMultiDict(items), frozenset(nulls)

    def sent_null(self, name: str) -> bool:
        """True when the JSON body set ``name`` to ``null`` explicitly."""
        return name in self._null_fields

    def validate_or_raise(self) -> "ApiForm":
        if not self.validate():
            raise ValidationError("The request is invalid.", details=self.errors)
        return self

    def payload(self, only_provided: bool = False) -> dict:
        """
        Return validated field data keyed by service field name.

        Args:
            only_provided: Keep only fields present in the request
                           (PATCH semantics).
        """
        data = {}
        for field in self:
            if field.name in self.non_payload_fields:
                continue
            if only_provided and not field.raw_data:
                continue
            data[_snake(field.name)] = field.data
        return data


# -- Auth and users --------------------------------------------------------


class LoginForm(ApiForm):
    email = StringField(
        validators=[
            DataRequired(message="Email cannot be empty"),
            Regexp(_EMAIL_PATTERN, message="Email format incorrect"),
        ],
        filters=[_strip],
    )
    password = PasswordField(validators=[DataRequired(message="Password cannot be empty")])


class RegisterForm(ApiForm):
    email = StringField(
        validators=[
            DataRequired(message="Email cannot be empty"),
            Regexp(_EMAIL_PATTERN, message="Email format incorrect"),
            Length(max=255),
        ],
        filters=[_strip],
    )
    password = PasswordField(validators=[DataRequired(), Length(min=8, max=128)])
    firstName = StringField(validators=[DataRequired(), Length(max=100)], filters=[_strip])
    lastName = StringField(validators=[Optional(), Length(max=100)], filters=[_strip])


class ProvisionUserForm(RegisterForm):
    role = enum_field(UserRole, required=True)
    organizationId = IntegerField(validators=[Optional()])


class RoleForm(ApiForm):
    role = enum_field(UserRole, required=True)
    organizationId = IntegerField(validators=[Optional()])


class UserListForm(ApiForm):
    page = IntegerField(validators=[Optional()])
    limit = IntegerField(validators=[Optional()])
    role = enum_field(UserRole)
    includeInactive = BooleanField(false_values=("false", "0", ""))


class AuditListForm(ApiForm):
    page = IntegerField(validators=[Optional()])
    limit = IntegerField(validators=[Optional()])
    userId = IntegerField(validators=[Optional()])
    actionType = StringField(validators=[Optional(), Length(max=50)], filters=[_strip])
    entityType = StringField(validators=[Optional(), Length(max=100)], filters=[_strip])
    startDate = IsoDateTimeField(validators=[Optional()])
    endDate = IsoDateTimeField(validators=[Optional()])


# -- Listing ---------------------------------------------------------------


def pagination_from(form: ApiForm) -> Pagination:
    """
    Build a ``Pagination`` from a form's ``page``/``limit`` fields.

    Absent values take the defaults; zero or negative values are passed
    through so ``Pagination`` rejects them.
    """
    page = form.page.data if form.page.data is not None else 1
    limit = (
        form.limit.data
        if form.limit.data is not None
        else current_app.config["DEFAULT_PAGE_LIMIT"]
    )
    return Pagination(page=page, limit=limit)


class PaginationForm(ApiForm):
    page = IntegerField(validators=[Optional()])
    limit = IntegerField(validators=[Optional()])
    name = StringField(validators=[Optional(), Length(max=200)], filters=[_strip])


class OpportunityFilterForm(ApiForm):
    page = IntegerField(validators=[Optional()])
    limit = IntegerField(validators=[Optional()])
    name = StringField(validators=[Optional(), Length(max=200)], filters=[_strip])
    location = StringField(validators=[Optional(), Length(max=200)], filters=[_strip])
    opportunityType = enum_field(OpportunityType)
    experienceLevel = enum_field(ExperienceLevel)
    category = enum_field(Category)
    paymentType = enum_field(PaymentType)
    organizationId = IntegerField(validators=[Optional()])
    createdAfter = IsoDateTimeField(validators=[Optional()])
    createdBefore = IsoDateTimeField(validators=[Optional()])
    sort = StringField(validators=[Optional(), Length(max=50)], filters=[_strip])

    non_payload_fields = ("page", "limit")

    def to_filter(self) -> OpportunityFilter:
        data = self.payload()
        return OpportunityFilter(**{key: value or None for key, value in data.items()})


# -- Entities --------------------------------------------------------------


class OpportunityForm(ApiForm):
    title = StringField(validators=[DataRequired(), Length(max=200)], filters=[_strip])
    description = StringField(validators=[DataRequired()], filters=[_strip])
    category = enum_field(Category, required=True)
    opportunityType = enum_field(OpportunityType, required=True)
    experienceLevel = enum_field(ExperienceLevel, required=True)
    paymentType = enum_field(PaymentType, required=True)
    location = StringField(validators=[DataRequired(), Length(max=200)], filters=[_strip])
    organizationId = IntegerField(validators=[Optional()])
    image = FileField()

    non_payload_fields = ("image",)


class OpportunityUpdateForm(ApiForm):
    title = StringField(validators=[Optional(), Length(max=200)], filters=[_strip])
    description = StringField(validators=[Optional()], filters=[_strip])
    category = enum_field(Category)
    opportunityType = enum_field(OpportunityType)
    experienceLevel = enum_field(ExperienceLevel)
    paymentType = enum_field(PaymentType)
    location = StringField(validators=[Optional(), Length(max=200)], filters=[_strip])
    image = FileField()

    non_payload_fields = ("image",)


class SkillForm(ApiForm):
    skillName = StringField(validators=[DataRequired(), Length(max=100)], filters=[_strip])
    description = StringField(validators=[Optional(), Length(max=2000)], filters=[_strip])


class SkillUpdateForm(ApiForm):
    skillName = StringField(validators=[Optional(), Length(max=100)], filters=[_strip])
    description = StringField(validators=[Optional(), Length(max=2000)], filters=[_strip])


class OrganizationForm(ApiForm):
    name = StringField(validators=[DataRequired(), Length(max=200)], filters=[_strip])
    description = StringField(validators=[Optional()], filters=[_strip])
    website = StringField(validators=[Optional(), Length(max=255)], filters=[_strip])
    email = StringField(
        validators=[Optional(), Regexp(_EMAIL_PATTERN, message="Email format incorrect")],
        filters=[_strip],
    )
    location = StringField(validators=[Optional(), Length(max=200)], filters=[_strip])


class OrganizationUpdateForm(OrganizationForm):
    name = StringField(validators=[Optional(), Length(max=200)], filters=[_strip])
