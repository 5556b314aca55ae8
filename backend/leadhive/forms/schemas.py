from pydantic import BaseModel, Field
from datetime import datetime
import uuid
from typing import Any, Dict, List, Literal, Optional

class FormField(BaseModel):
    id: str = Field(default_factory=lambda: f"field_{uuid.uuid4().hex[:8]}")
    label: str
    type: Literal["text", "email", "tel", "number", "textarea", "select"] = "text"
    options: Optional[List[str]] = None
    required: bool = False

class FormCreate(BaseModel):
    name: str = Field(min_length=1)
    custom_fields: List[FormField] = []

class FormUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    custom_fields: Optional[List[FormField]] = None

class FormRead(BaseModel):
    id: uuid.UUID
    name: str
    custom_fields: List[FormField]
    visits: int
    submissions: int
    jotform_id: Optional[str] = None
    jotform_url: Optional[str] = None
    created_at: datetime

class PublicFormRead(BaseModel):
    id: uuid.UUID
    name: str
    custom_fields: List[FormField]

class FormSubmission(BaseModel):
    message: str

# Submissions are keyed by field id; values may be structured (name/phone/address objects)
SubmittedData = Dict[str, Any]
