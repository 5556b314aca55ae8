from pydantic import BaseModel, field_validator
from datetime import date, datetime
import uuid
from typing import Any, Dict, Optional

from leadhive.leads.models import BLANK_AS_NULL, blank_to_none

class ContactRead(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    phone: Optional[str] = None
    company: Optional[str] = None
    form_id: Optional[uuid.UUID] = None
    form_name: str
    form_data: Dict[str, Any]
    created_at: datetime

class ContactConvert(BaseModel):
    # Both must be picked by the operator, nothing is chosen automatically
    pipeline_id: uuid.UUID
    stage_id: uuid.UUID
    interested_service: Optional[str] = None
    budget: Optional[float] = None
    assigned_to: Optional[str] = None
    priority: Optional[str] = None
    next_follow_up: Optional[date] = None
    notes: Optional[str] = None

    check_blank_as_null = field_validator(*BLANK_AS_NULL, mode="before")(blank_to_none)
