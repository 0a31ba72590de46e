"""Wire formats of the helpdesk API and their conversion to domain models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from helpdesk_tui.tickets.models import Actor, Followup, Ticket


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def _null_to_default(cls, value: object, info: ValidationInfo) -> object:
        # The API sends null for unset fields; required fields still fail.
        if value is None and info.field_name is not None:
            field = cls.model_fields[info.field_name]
            if not field.is_required():
                return field.get_default(call_default_factory=True)
        return value


class TokenPayload(_Payload):
    access_token: str = Field(..., min_length=1)


class CurrentUserPayload(_Payload):
    id: int


class NamedRefPayload(_Payload):
    id: int = 0
    name: str = ""


class TicketPayload(_Payload):
    id: int
    name: str = ""
    content: str = ""
    date: str = ""
    status: NamedRefPayload = Field(default_factory=NamedRefPayload)
    priority: int = 0
    entity: NamedRefPayload = Field(default_factory=NamedRefPayload)

    def to_domain(self) -> Ticket:
        return Ticket(
            id=self.id,
            title=self.name,
            content=self.content,
            date=self.date,
            status_id=self.status.id,
            status_name=self.status.name,
            priority=self.priority,
            entity_id=self.entity.id,
            entity_name=self.entity.name,
        )


class ActorPayload(_Payload):
    id: int
    name: str = ""
    type: str = ""
    role: str = ""

    def to_domain(self) -> Actor:
        return Actor(id=self.id, name=self.name, type=self.type, role=self.role)


class FollowupPayload(_Payload):
    id: int
    date: str = ""
    content: str = ""
    user: NamedRefPayload = Field(default_factory=NamedRefPayload)

    def to_domain(self) -> Followup:
        return Followup(
            id=self.id,
            date=self.date,
            content=self.content,
            author_id=self.user.id,
            author_name=self.user.name,
        )


class TimelineEntryPayload(_Payload):
    """Timeline element wrapping an item under a type tag."""

    type: str = ""
    item: FollowupPayload
