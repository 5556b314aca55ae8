import logging
from typing import Optional, List
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select
import uuid

from leadhive.events import leads_changed
from leadhive.leads.models import Lead
from leadhive.pipelines.models import Pipeline, Stage

logger = logging.getLogger(__name__)

DEFAULT_PIPELINE_NAME = "Main Pipeline"

DEFAULT_STAGES = [
    ("Enquiry", "#818cf8"),
    ("Contacted", "#fbbf24"),
    ("Qualified", "#60a5fa"),
    ("Quotation Sent", "#c084fc"),
    ("Payment Done", "#4ade80"),
]

STAGE_FIELDS = {"name", "color", "order"}


def get_pipelines(session: Session, owner_id: uuid.UUID) -> List[Pipeline]:
    # Oldest first, so "the first pipeline" stays the same one over time
    try:
        return list(session.exec(
            select(Pipeline)
            .where(Pipeline.owner_id == owner_id)
            .order_by(Pipeline.created_at.asc())
        ).all())
    except SQLAlchemyError:
        logger.exception("Failed to load pipelines for %s", owner_id)
        return []

def get_pipeline(session: Session, owner_id: uuid.UUID, pipeline_id: uuid.UUID) -> Optional[Pipeline]:
    try:
        return session.exec(
            select(Pipeline)
            .where(Pipeline.id == pipeline_id)
            .where(Pipeline.owner_id == owner_id)
        ).first()
    except SQLAlchemyError:
        logger.exception("Failed to load pipeline %s", pipeline_id)
        return None

def create_pipeline(session: Session, owner_id: uuid.UUID, name: str) -> Optional[Pipeline]:
    db_pipeline = Pipeline(owner_id=owner_id, name=name)
    try:
        session.add(db_pipeline)
        session.commit()
        session.refresh(db_pipeline)
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed to create pipeline %r", name)
        return None

    logger.info("Created pipeline %s", db_pipeline.id)
    leads_changed.emit(entity="pipeline", action="created", id=db_pipeline.id)
    return db_pipeline

def update_pipeline(session: Session, owner_id: uuid.UUID, pipeline_id: uuid.UUID, name: str) -> Optional[Pipeline]:
    db_pipeline = get_pipeline(session, owner_id, pipeline_id)
    if not db_pipeline:
        return None

    db_pipeline.name = name
    try:
        session.add(db_pipeline)
        session.commit()
        session.refresh(db_pipeline)
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed to update pipeline %s", pipeline_id)
        return None

    leads_changed.emit(entity="pipeline", action="updated", id=db_pipeline.id)
    return db_pipeline

def delete_pipeline(session: Session, owner_id: uuid.UUID, pipeline_id: uuid.UUID) -> bool:
    """Delete a pipeline together with its stages.

    Leads that still point at the pipeline or one of its stages are left
    as they are; readers fall back to the first pipeline / status matching.
    """
    db_pipeline = get_pipeline(session, owner_id, pipeline_id)
    if not db_pipeline:
        return False

    try:
        for stage in session.exec(select(Stage).where(Stage.pipeline_id == pipeline_id)).all():
            session.delete(stage)
        session.delete(db_pipeline)
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed to delete pipeline %s", pipeline_id)
        return False

    logger.info("Deleted pipeline %s", pipeline_id)
    leads_changed.emit(entity="pipeline", action="deleted", id=pipeline_id)
    return True

def get_stages(session: Session, owner_id: uuid.UUID, pipeline_id: uuid.UUID) -> List[Stage]:
    try:
        return list(session.exec(
            select(Stage)
            .where(Stage.pipeline_id == pipeline_id)
            .where(Stage.owner_id == owner_id)
            .order_by(Stage.order.asc())
        ).all())
    except SQLAlchemyError:
        logger.exception("Failed to load stages for pipeline %s", pipeline_id)
        return []

def get_all_stages(session: Session, owner_id: uuid.UUID) -> List[Stage]:
    try:
        return list(session.exec(
            select(Stage).where(Stage.owner_id == owner_id).order_by(Stage.order.asc())
        ).all())
    except SQLAlchemyError:
        logger.exception("Failed to load stages for %s", owner_id)
        return []

def get_stage(session: Session, owner_id: uuid.UUID, stage_id: uuid.UUID) -> Optional[Stage]:
    try:
        return session.exec(
            select(Stage)
            .where(Stage.id == stage_id)
            .where(Stage.owner_id == owner_id)
        ).first()
    except SQLAlchemyError:
        logger.exception("Failed to load stage %s", stage_id)
        return None

def _next_stage_order(session: Session, pipeline_id: uuid.UUID) -> int:
    current = session.exec(
        select(func.max(Stage.order)).where(Stage.pipeline_id == pipeline_id)
    ).one()
    return (current or 0) + 1

def create_stage(
    session: Session,
    owner_id: uuid.UUID,
    pipeline_id: uuid.UUID,
    name: str,
    color: str = "#94a3b8"
) -> Optional[Stage]:
    if not get_pipeline(session, owner_id, pipeline_id):
        return None

    try:
        db_stage = Stage(
            owner_id=owner_id,
            pipeline_id=pipeline_id,
            name=name,
            color=color,
            order=_next_stage_order(session, pipeline_id)
        )
        session.add(db_stage)
        session.commit()
        session.refresh(db_stage)
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed to create stage %r in pipeline %s", name, pipeline_id)
        return None

    leads_changed.emit(entity="stage", action="created", id=db_stage.id)
    return db_stage

def update_stage(session: Session, owner_id: uuid.UUID, stage_id: uuid.UUID, fields: dict) -> Optional[Stage]:
    db_stage = get_stage(session, owner_id, stage_id)
    if not db_stage:
        return None

    update_data = {k: v for k, v in fields.items() if k in STAGE_FIELDS and v is not None}
    old_name = db_stage.name
    for key, value in update_data.items():
        setattr(db_stage, key, value)

    try:
        session.add(db_stage)
        # Lead.status is a copy of the stage name, keep it in step on rename
        if db_stage.name != old_name:
            leads = session.exec(
                select(Lead)
                .where(Lead.stage_id == stage_id)
                .where(Lead.owner_id == owner_id)
            ).all()
            for lead in leads:
                lead.status = db_stage.name
                session.add(lead)
        session.commit()
        session.refresh(db_stage)
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed to update stage %s", stage_id)
        return None

    leads_changed.emit(entity="stage", action="updated", id=db_stage.id)
    return db_stage

def delete_stage(session: Session, owner_id: uuid.UUID, stage_id: uuid.UUID) -> bool:
    db_stage = get_stage(session, owner_id, stage_id)
    if not db_stage:
        return False

    try:
        session.delete(db_stage)
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed to delete stage %s", stage_id)
        return False

    leads_changed.emit(entity="stage", action="deleted", id=stage_id)
    return True

def ensure_default_pipeline(session: Session, owner_id: uuid.UUID) -> Optional[Pipeline]:
    """Return the tenant's first pipeline, creating "Main Pipeline" if there is none."""
    pipelines = get_pipelines(session, owner_id)
    if pipelines:
        return pipelines[0]

    db_pipeline = Pipeline(owner_id=owner_id, name=DEFAULT_PIPELINE_NAME)
    try:
        session.add(db_pipeline)
        session.flush()
        for order, (name, color) in enumerate(DEFAULT_STAGES, start=1):
            session.add(Stage(
                owner_id=owner_id,
                pipeline_id=db_pipeline.id,
                name=name,
                color=color,
                order=order
            ))
        session.commit()
        session.refresh(db_pipeline)
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed to bootstrap default pipeline for %s", owner_id)
        return None

    logger.info("Bootstrapped default pipeline %s for %s", db_pipeline.id, owner_id)
    leads_changed.emit(entity="pipeline", action="created", id=db_pipeline.id)
    return db_pipeline
