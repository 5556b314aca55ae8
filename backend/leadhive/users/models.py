from typing import Optional
from sqlmodel import SQLModel, Field
import uuid
from datetime import datetime, timezone

# A user is the tenant: every pipeline, lead, form and contact row
# carries the id of the user that owns it.
class User(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    email: str = Field(unique=True, index=True)
    hashed_password: str

    name: Optional[str] = None
    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
