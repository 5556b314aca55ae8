from typing import List, Optional
from sqlmodel import SQLModel, Field, Column, JSON
import uuid
from datetime import datetime, timezone

FIELD_TYPES = ("text", "email", "tel", "number", "textarea", "select")

class LeadForm(SQLModel, table=True):
    __tablename__ = "lead_forms"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    owner_id: uuid.UUID = Field(foreign_key="user.id", index=True)
    name: str

    # Ordered field definitions; each field's "id" keys Contact.form_data.
    # Stored in the "fields" column.
    custom_fields: List[dict] = Field(default_factory=list, sa_column=Column("fields", JSON))

    # Only ever incremented, by the public endpoints
    visits: int = Field(default=0)
    submissions: int = Field(default=0)

    jotform_id: Optional[str] = None
    jotform_url: Optional[str] = None

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
