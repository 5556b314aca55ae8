from typing import Optional
from sqlmodel import SQLModel, Field, Column, JSON
import uuid
from datetime import datetime, timezone

# An inbound submission that has not been qualified into a lead yet
class Contact(SQLModel, table=True):
    __tablename__ = "contacts"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    owner_id: uuid.UUID = Field(foreign_key="user.id", index=True)

    name: str
    email: str = ""
    phone: Optional[str] = None
    company: Optional[str] = None

    # Soft reference, the form may have been deleted since
    form_id: Optional[uuid.UUID] = Field(default=None, index=True)
    form_name: str = ""
    form_data: dict = Field(default_factory=dict, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
