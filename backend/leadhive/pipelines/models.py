from sqlmodel import SQLModel, Field
import uuid
from datetime import datetime, timezone

class Pipeline(SQLModel, table=True):
    __tablename__ = "pipelines"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    owner_id: uuid.UUID = Field(foreign_key="user.id", index=True)
    name: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

class Stage(SQLModel, table=True):
    __tablename__ = "pipeline_stages"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    owner_id: uuid.UUID = Field(foreign_key="user.id", index=True)
    pipeline_id: uuid.UUID = Field(foreign_key="pipelines.id", index=True)
    name: str
    color: str = Field(default="#94a3b8")
    # Ascending order = earlier in the sales process. Unique per pipeline by
    # convention only; create_stage appends after the current last stage.
    order: int = Field(default=1)
