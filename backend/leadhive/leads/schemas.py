from pydantic import BaseModel, Field, field_validator
from datetime import date, datetime
import uuid
from typing import Optional, List

from leadhive.leads.models import BLANK_AS_NULL, DEFAULT_STATUS, blank_to_none

class LeadBase(BaseModel):
    name: str
    email: str = ""
    phone: str = ""
    company: Optional[str] = None
    source: Optional[str] = None
    status: str = DEFAULT_STATUS
    priority: Optional[str] = None
    budget: Optional[float] = None
    assigned_to: Optional[str] = None
    interested_service: Optional[str] = None
    next_follow_up: Optional[date] = None
    notes: Optional[str] = None
    pipeline_id: Optional[uuid.UUID] = None
    stage_id: Optional[uuid.UUID] = None

    check_blank_as_null = field_validator(*BLANK_AS_NULL, mode="before")(blank_to_none)

class LeadCreate(LeadBase):
    pass

class LeadUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    source: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    budget: Optional[float] = None
    assigned_to: Optional[str] = None
    interested_service: Optional[str] = None
    next_follow_up: Optional[date] = None
    notes: Optional[str] = None
    pipeline_id: Optional[uuid.UUID] = None
    stage_id: Optional[uuid.UUID] = None

    check_blank_as_null = field_validator(*BLANK_AS_NULL, mode="before")(blank_to_none)

class LeadRead(LeadBase):
    id: uuid.UUID
    created_at: datetime

class LeadMove(BaseModel):
    stage_id: uuid.UUID

class BulkDelete(BaseModel):
    ids: List[uuid.UUID] = Field(min_length=1)

class BulkUpdate(BaseModel):
    ids: List[uuid.UUID] = Field(min_length=1)
    changes: LeadUpdate

class BulkResult(BaseModel):
    count: int

class ImportResult(BaseModel):
    created: int = 0
    updated: int = 0
