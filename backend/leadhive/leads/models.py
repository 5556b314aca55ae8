from typing import Optional
from sqlmodel import SQLModel, Field
import uuid
from datetime import date, datetime, timezone

# Initial status for leads that did not come in through a stage
DEFAULT_STATUS = "New"

class Lead(SQLModel, table=True):
    __tablename__ = "leads"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    owner_id: uuid.UUID = Field(foreign_key="user.id", index=True)

    name: str = Field(index=True)
    email: str = ""
    phone: str = ""
    company: Optional[str] = None
    source: Optional[str] = None
    # Copy of the current stage's name, not a foreign key
    status: str = Field(default=DEFAULT_STATUS, index=True)
    priority: Optional[str] = None
    budget: Optional[float] = None
    assigned_to: Optional[str] = None
    interested_service: Optional[str] = None
    next_follow_up: Optional[date] = None
    notes: Optional[str] = None

    # Soft references: deleting a pipeline leaves these pointing nowhere
    pipeline_id: Optional[uuid.UUID] = Field(default=None, index=True)
    stage_id: Optional[uuid.UUID] = Field(default=None, index=True)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

# Columns a caller may set; anything else is dropped before it reaches the table
LEAD_COLUMNS = (
    "name", "email", "phone", "company", "source", "status", "priority", "budget",
    "assigned_to", "interested_service", "next_follow_up", "notes", "pipeline_id", "stage_id",
)

# Forms post "" for untouched inputs; these columns store NULL instead
BLANK_AS_NULL = ("budget", "next_follow_up", "assigned_to", "pipeline_id", "stage_id")

def blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value
