from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field

from ticketa.schemas.events import EventSummary


class ReservationCreate(BaseModel):
    event_id: int = Field(ge=1, validation_alias=AliasChoices("event_id", "eventId"))


class ReservationOut(BaseModel):
    id: int
    event_id: int
    user_id: int
    status: str
    ticket_code: str
    created_at: datetime
    updated_at: datetime
    event: EventSummary | None = None

    class Config:
        from_attributes = True
