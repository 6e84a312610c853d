from pydantic import BaseModel


class EventStatsOut(BaseModel):
    event_id: int
    status: str
    total_tickets: int
    available_tickets: int
    pending_count: int
    confirmed_count: int
    refused_count: int
    cancelled_count: int
    consistent: bool


class ReportOut(BaseModel):
    total_tickets: int
    total_available: int
    total_reserved: int
    total_pending: int
    total_confirmed: int
