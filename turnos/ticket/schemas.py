# turnos/ticket/schemas.py
from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator, AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def _as_utc(value: datetime) -> datetime:
    # SQLite drops the offset; stored values are UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class TicketCreate(BaseModel):
    # camelCase, snake_case and the legacy Spanish keys are all accepted
    user_id: str | None = Field(default=None, validation_alias=AliasChoices("userId", "user_id", "id_usuario"))
    name: str | None = Field(default=None, validation_alias=AliasChoices("name", "nombre"))
    request: str | None = Field(default=None, validation_alias=AliasChoices("request", "solicitud"))

    @field_validator("user_id", mode="before")
    @classmethod
    def _numeric_user_id(cls, value):
        # ManyChat subscriber ids arrive as numbers
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class TicketUpdate(BaseModel):
    name: str | None = Field(default=None, validation_alias=AliasChoices("name", "nombre"))
    request: str | None = Field(default=None, validation_alias=AliasChoices("request", "solicitud"))


class TicketOut(BaseModel):
    id: int
    user_id: str
    name: str
    request: str
    ticket_label: str
    created_at: UtcDatetime

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


class TicketIssued(BaseModel):
    id: int
    ticket_label: str
    name: str
    request: str
    created_at: UtcDatetime
    message: str
    pdf_url: str
    is_new: bool

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TicketChanged(BaseModel):
    message: str
    ticket: TicketOut
