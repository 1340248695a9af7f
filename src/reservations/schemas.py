"""
Input schemas for the reservation tools.

Pydantic models declaring the shape and constraints of each operation's
input. parse_input() turns a raw argument mapping into a typed model or
raises ValidationError listing every violated constraint.
"""

from typing import Annotated, Any, Dict, List, Optional, Type, TypeVar

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic import model_validator

from .errors import ValidationError, ValidationIssue

NOTES_MAX_LENGTH = 2000

NO_OP_UPDATE_MESSAGE = (
    "Provide at least one field to update (new contact info, date, time, etc.)."
)

# Fields an update may change besides the locating pair
UPDATE_FIELDS = ("new_mobile", "new_name", "nb_people", "email", "date", "time", "notes")


def _non_empty(message: str) -> AfterValidator:
    def check(value: str) -> str:
        if not value:
            raise ValueError(message)
        return value

    return AfterValidator(check)


def _coerce_party_size(value: Any) -> Any:
    """Coerce numeric-like input ("4", 4.0) to an int."""
    if isinstance(value, bool):
        raise ValueError("The number of people must be a number")

    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            raise ValueError("The number of people must be a number") from None
    elif not isinstance(value, (int, float)):
        raise ValueError("The number of people must be a number")

    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError("The number of people must be an integer")
        value = int(value)

    return value


def _at_least_one(value: int) -> int:
    if value < 1:
        raise ValueError("At least one person must be included in the reservation")
    return value


def _notes_length(value: str) -> str:
    if len(value) > NOTES_MAX_LENGTH:
        raise ValueError(f"Notes should be {NOTES_MAX_LENGTH} characters or fewer")
    return value


def _check_email(value: str) -> str:
    """Syntax check only; the caller's spelling is stored as given."""
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValueError(f"Invalid email address: {e}") from None
    return value


Mobile = Annotated[str, _non_empty("Mobile number is required")]
Email = Annotated[str, AfterValidator(_check_email)]
GuestName = Annotated[str, _non_empty("Name is required")]
PartySize = Annotated[int, BeforeValidator(_coerce_party_size), AfterValidator(_at_least_one)]
ReservationDate = Annotated[str, _non_empty("Reservation date is required")]
ReservationTime = Annotated[str, _non_empty("Reservation time is required")]
Notes = Annotated[str, AfterValidator(_notes_length)]

_NON_EMPTY = {"minLength": 1}


def _mobile_field(description: str, **kwargs: Any) -> Any:
    return Field(description=description, json_schema_extra=_NON_EMPTY, **kwargs)


def _name_field(description: str, **kwargs: Any) -> Any:
    return Field(description=description, json_schema_extra=_NON_EMPTY, **kwargs)


def _party_size_field(**kwargs: Any) -> Any:
    return Field(
        description="Number of guests included in the reservation.",
        json_schema_extra={"minimum": 1},
        **kwargs,
    )


def _date_field(**kwargs: Any) -> Any:
    return Field(
        description="Reservation date in YYYY-MM-DD format.",
        json_schema_extra=_NON_EMPTY,
        **kwargs,
    )


def _time_field(**kwargs: Any) -> Any:
    return Field(
        description="Reservation time in HH:MM format (24-hour clock).",
        json_schema_extra=_NON_EMPTY,
        **kwargs,
    )


def _email_field() -> Any:
    return Field(
        default=None,
        description="Contact email address for the reservation.",
        json_schema_extra={"format": "email"},
    )


def _notes_field() -> Any:
    return Field(
        default=None,
        description="Additional notes or special requests for the reservation.",
        json_schema_extra={"maxLength": NOTES_MAX_LENGTH},
    )


class ReservationInput(BaseModel):
    """Base for tool inputs. Unknown keys are dropped."""

    model_config = ConfigDict(extra="ignore")

    @classmethod
    def cross_field_issues(cls, raw: Any) -> List[ValidationIssue]:
        """Issues the raw input has regardless of field-level errors."""
        return []


class CreateReservationInput(ReservationInput):
    """Input for createReservation."""

    mobile: Mobile = _mobile_field(
        "Customer mobile phone number, including country code if applicable."
    )
    name: GuestName = _name_field("Full name of the guest who made the reservation.")
    nb_people: PartySize = _party_size_field()
    date: ReservationDate = _date_field()
    time: ReservationTime = _time_field()
    email: Optional[Email] = _email_field()
    notes: Optional[Notes] = _notes_field()

    def to_record(self) -> Dict[str, Any]:
        """Row to insert; unset optional columns are omitted."""
        return self.model_dump(exclude_none=True)


class UpdateReservationInput(ReservationInput):
    """Input for updateReservation. (mobile, name) locate the current row."""

    mobile: Mobile = _mobile_field("Current mobile number on the reservation you want to update.")
    name: GuestName = _name_field("Current guest name on the reservation you want to update.")
    new_mobile: Optional[Mobile] = _mobile_field(
        "New mobile number to store for the reservation.", default=None
    )
    new_name: Optional[GuestName] = _name_field(
        "New guest name to store for the reservation.", default=None
    )
    nb_people: Optional[PartySize] = _party_size_field(default=None)
    email: Optional[Email] = _email_field()
    date: Optional[ReservationDate] = _date_field(default=None)
    time: Optional[ReservationTime] = _time_field(default=None)
    notes: Optional[Notes] = _notes_field()

    @model_validator(mode="after")
    def _require_change(self) -> "UpdateReservationInput":
        if not self.changed_fields():
            raise ValueError(NO_OP_UPDATE_MESSAGE)
        return self

    def changed_fields(self) -> Dict[str, Any]:
        """Supplied update fields, keyed by input name."""
        return {
            field: getattr(self, field)
            for field in UPDATE_FIELDS
            if getattr(self, field) is not None
        }

    def to_changes(self) -> Dict[str, Any]:
        """Column updates with new_mobile/new_name mapped onto mobile/name."""
        changes = self.changed_fields()
        if "new_mobile" in changes:
            changes["mobile"] = changes.pop("new_mobile")
        if "new_name" in changes:
            changes["name"] = changes.pop("new_name")
        return changes

    @classmethod
    def cross_field_issues(cls, raw: Any) -> List[ValidationIssue]:
        if isinstance(raw, dict) and any(raw.get(field) is not None for field in UPDATE_FIELDS):
            return []
        return [ValidationIssue(field=None, message=NO_OP_UPDATE_MESSAGE)]


class DeleteReservationInput(ReservationInput):
    """Input for deleteReservation."""

    mobile: Mobile = _mobile_field("Mobile number stored on the reservation you want to remove.")
    name: GuestName = _name_field("Guest name stored on the reservation you want to remove.")


class LookupReservationInput(ReservationInput):
    """Input for getReservation. date/time narrow the match when given."""

    mobile: Mobile = _mobile_field("Mobile number stored on the reservation you want to find.")
    name: GuestName = _name_field("Guest name stored on the reservation you want to find.")
    date: Optional[ReservationDate] = _date_field(default=None)
    time: Optional[ReservationTime] = _time_field(default=None)


InputModel = TypeVar("InputModel", bound=ReservationInput)


def _issue_from_error(error: Dict[str, Any]) -> ValidationIssue:
    location = ".".join(str(part) for part in error.get("loc", ()))
    message = str(error.get("msg", "Invalid value"))
    if message.startswith("Value error, "):
        message = message[len("Value error, ") :]
    return ValidationIssue(field=location or None, message=message)


def parse_input(model: Type[InputModel], raw: Any) -> InputModel:
    """
    Validate raw tool arguments against an input model.

    Args:
        model: Input model class to validate against
        raw: Raw argument mapping as received from the client

    Returns:
        Validated model instance

    Raises:
        ValidationError: Listing every violated constraint
    """
    try:
        return model.model_validate({} if raw is None else raw)
    except PydanticValidationError as e:
        issues = [_issue_from_error(error) for error in e.errors()]

        # Field errors stop the model validator from running, so report
        # cross-field problems alongside them
        for issue in model.cross_field_issues(raw):
            if issue not in issues:
                issues.append(issue)

        raise ValidationError(issues) from None


def input_json_schema(model: Type[ReservationInput]) -> Dict[str, Any]:
    """JSON Schema for a tool input model, as advertised in tools/list."""
    schema = model.model_json_schema()
    schema.pop("title", None)
    schema.pop("description", None)
    for prop in schema.get("properties", {}).values():
        prop.pop("title", None)
    return schema
