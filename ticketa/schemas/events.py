from datetime import datetime

from pydantic import BaseModel, Field


# ---------- Event ----------
class EventCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(default="", max_length=5000)
    location: str = Field(default="", max_length=200)
    starts_at: datetime | None = None
    total_tickets: int = Field(ge=1)


class EventOut(BaseModel):
    id: int
    title: str
    description: str
    location: str
    starts_at: datetime | None
    status: str
    total_tickets: int
    available_tickets: int

    class Config:
        from_attributes = True


class EventSummary(BaseModel):
    id: int
    title: str
    status: str

    class Config:
        from_attributes = True
