from pydantic import BaseModel, Field
from datetime import datetime
import uuid
from typing import Optional, List

class PipelineCreate(BaseModel):
    name: str = Field(min_length=1)

class PipelineUpdate(BaseModel):
    name: str = Field(min_length=1)

class PipelineRead(BaseModel):
    id: uuid.UUID
    name: str
    created_at: datetime

class StageCreate(BaseModel):
    name: str = Field(min_length=1)
    color: str = "#94a3b8"

class StageUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    color: Optional[str] = None
    order: Optional[int] = None

class StageRead(BaseModel):
    id: uuid.UUID
    pipeline_id: uuid.UUID
    name: str
    color: str
    order: int

class PipelineWithStages(PipelineRead):
    stages: List[StageRead] = []
