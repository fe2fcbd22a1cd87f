from typing import Annotated, Any, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, BeforeValidator, ConfigDict, EmailStr, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from errors import ValidationError


def _strip(value):
    return value.strip() if isinstance(value, str) else value


TodoText = Annotated[str, BeforeValidator(_strip), Field(min_length=1, max_length=1000)]
Email = Annotated[EmailStr, BeforeValidator(_strip)]


def normalize_email(value):
    # Same form EmailStr stores at registration; unparseable input stays as is
    try:
        return validate_email(value, check_deliverability=False).normalized
    except EmailNotValidError:
        return value


class RequestBody(BaseModel):
    # unknown fields (e.g. _creator, completedAt) are dropped
    model_config = ConfigDict(extra='ignore')

    @classmethod
    def parse(cls, data):
        try:
            return cls.model_validate(data if data is not None else {})
        except PydanticValidationError as exc:
            raise ValidationError(_error_detail(exc)) from exc


class TodoCreate(RequestBody):
    text: TodoText


class TodoUpdate(RequestBody):
    text: Optional[TodoText] = None
    # Only a JSON ``true`` marks a todo complete, so keep the raw value.
    completed: Any = None


class UserCredentials(RequestBody):
    email: Email
    password: str = Field(min_length=6)


class LoginCredentials(RequestBody):
    email: str = ''
    password: str = ''

    @field_validator('email')
    @classmethod
    def normalize(cls, value):
        return normalize_email(value.strip())


def _error_detail(exc):
    detail = {}
    for error in exc.errors():
        field = '.'.join(str(part) for part in error['loc']) or 'body'
        detail.setdefault(field, error['msg'])
    return detail
