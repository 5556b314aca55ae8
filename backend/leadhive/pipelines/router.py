from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session
from typing import List
import uuid

from leadhive.database import get_session
from leadhive.auth.router import get_current_user
from leadhive.users.models import User
from leadhive.pipelines.schemas import (
    PipelineCreate,
    PipelineRead,
    PipelineUpdate,
    PipelineWithStages,
    StageCreate,
    StageRead,
    StageUpdate,
)
from leadhive.pipelines import service

router = APIRouter(tags=["pipelines"])

def _internal_error():
    return HTTPException(status_code=500, detail="Internal server error")

@router.get("/pipelines/", response_model=List[PipelineRead])
def read_pipelines(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    return service.get_pipelines(session, current_user.id)

@router.post("/pipelines/", response_model=PipelineRead)
def create_pipeline(
    pipeline_create: PipelineCreate,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    pipeline = service.create_pipeline(session, current_user.id, pipeline_create.name)
    if not pipeline:
        raise _internal_error()
    return pipeline

@router.post("/pipelines/default", response_model=PipelineWithStages)
def ensure_default_pipeline(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    pipeline = service.ensure_default_pipeline(session, current_user.id)
    if not pipeline:
        raise _internal_error()
    stages = service.get_stages(session, current_user.id, pipeline.id)
    return PipelineWithStages(
        id=pipeline.id,
        name=pipeline.name,
        created_at=pipeline.created_at,
        stages=[StageRead.model_validate(s, from_attributes=True) for s in stages]
    )

@router.get("/pipelines/{pipeline_id}", response_model=PipelineWithStages)
def read_pipeline(
    pipeline_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    pipeline = service.get_pipeline(session, current_user.id, pipeline_id)
    if not pipeline:
        raise HTTPException(status_code=404, detail="Pipeline not found")
    stages = service.get_stages(session, current_user.id, pipeline_id)
    return PipelineWithStages(
        id=pipeline.id,
        name=pipeline.name,
        created_at=pipeline.created_at,
        stages=[StageRead.model_validate(s, from_attributes=True) for s in stages]
    )

@router.put("/pipelines/{pipeline_id}", response_model=PipelineRead)
def update_pipeline(
    pipeline_id: uuid.UUID,
    pipeline_update: PipelineUpdate,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    if not service.get_pipeline(session, current_user.id, pipeline_id):
        raise HTTPException(status_code=404, detail="Pipeline not found")
    pipeline = service.update_pipeline(session, current_user.id, pipeline_id, pipeline_update.name)
    if not pipeline:
        raise _internal_error()
    return pipeline

@router.delete("/pipelines/{pipeline_id}")
def delete_pipeline(
    pipeline_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    if not service.get_pipeline(session, current_user.id, pipeline_id):
        raise HTTPException(status_code=404, detail="Pipeline not found")
    if not service.delete_pipeline(session, current_user.id, pipeline_id):
        raise _internal_error()
    return {"ok": True}

@router.get("/pipelines/{pipeline_id}/stages", response_model=List[StageRead])
def read_stages(
    pipeline_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    if not service.get_pipeline(session, current_user.id, pipeline_id):
        raise HTTPException(status_code=404, detail="Pipeline not found")
    return service.get_stages(session, current_user.id, pipeline_id)

@router.post("/pipelines/{pipeline_id}/stages", response_model=StageRead)
def create_stage(
    pipeline_id: uuid.UUID,
    stage_create: StageCreate,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    if not service.get_pipeline(session, current_user.id, pipeline_id):
        raise HTTPException(status_code=404, detail="Pipeline not found")
    stage = service.create_stage(session, current_user.id, pipeline_id, stage_create.name, stage_create.color)
    if not stage:
        raise _internal_error()
    return stage

@router.patch("/stages/{stage_id}", response_model=StageRead)
def update_stage(
    stage_id: uuid.UUID,
    stage_update: StageUpdate,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    if not service.get_stage(session, current_user.id, stage_id):
        raise HTTPException(status_code=404, detail="Stage not found")
    stage = service.update_stage(session, current_user.id, stage_id, stage_update.model_dump(exclude_unset=True))
    if not stage:
        raise _internal_error()
    return stage

@router.delete("/stages/{stage_id}")
def delete_stage(
    stage_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    if not service.get_stage(session, current_user.id, stage_id):
        raise HTTPException(status_code=404, detail="Stage not found")
    if not service.delete_stage(session, current_user.id, stage_id):
        raise _internal_error()
    return {"ok": True}
