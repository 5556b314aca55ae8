import logging
from typing import Any, Dict, Iterable, List, Optional
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select
import uuid

from leadhive.events import leads_changed
from leadhive.leads.models import BLANK_AS_NULL, DEFAULT_STATUS, LEAD_COLUMNS, Lead, blank_to_none
from leadhive.leads.schemas import LeadUpdate
from leadhive.pipelines import service as pipelines_service
from leadhive.pipelines.models import Stage

logger = logging.getLogger(__name__)

# Columns that cannot hold NULL; an explicit None in an update is ignored
REQUIRED_COLUMNS = ("name", "status")
TEXT_COLUMNS = ("email", "phone")


def sanitize_lead_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only known lead columns and turn blank optional values into None."""
    clean = {}
    for key, value in fields.items():
        if key not in LEAD_COLUMNS:
            continue
        if key in BLANK_AS_NULL:
            value = blank_to_none(value)
        if key in TEXT_COLUMNS and value is None:
            value = ""
        clean[key] = value
    return clean

def as_uuid(value: Any) -> Optional[uuid.UUID]:
    if value is None or isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None

def get_leads(
    session: Session,
    owner_id: uuid.UUID,
    skip: int = 0,
    limit: Optional[int] = None,
    status: Optional[str] = None,
    pipeline_id: Optional[uuid.UUID] = None
) -> List[Lead]:
    query = select(Lead).where(Lead.owner_id == owner_id)

    if status:
        query = query.where(Lead.status == status)

    if pipeline_id:
        query = query.where(Lead.pipeline_id == pipeline_id)

    query = query.order_by(Lead.created_at.desc()).offset(skip)
    if limit is not None:
        query = query.limit(limit)

    try:
        return list(session.exec(query).all())
    except SQLAlchemyError:
        logger.exception("Failed to load leads for %s", owner_id)
        return []

def get_lead(session: Session, owner_id: uuid.UUID, lead_id: uuid.UUID) -> Optional[Lead]:
    try:
        return session.exec(
            select(Lead)
            .where(Lead.id == lead_id)
            .where(Lead.owner_id == owner_id)
        ).first()
    except SQLAlchemyError:
        logger.exception("Failed to load lead %s", lead_id)
        return None

def _check_references(session: Session, owner_id: uuid.UUID, data: Dict[str, Any]) -> Optional[Stage]:
    """Drop pipeline/stage ids the tenant does not own; return the owned stage, if any."""
    stage = None
    if data.get("stage_id") is not None:
        stage = pipelines_service.get_stage(session, owner_id, data["stage_id"])
        if stage is None:
            logger.warning("Ignoring unknown stage %s for %s", data["stage_id"], owner_id)
            del data["stage_id"]

    if data.get("pipeline_id") is not None and not pipelines_service.get_pipeline(session, owner_id, data["pipeline_id"]):
        logger.warning("Ignoring unknown pipeline %s for %s", data["pipeline_id"], owner_id)
        del data["pipeline_id"]
    return stage

def add_lead(session: Session, owner_id: uuid.UUID, fields: Dict[str, Any]) -> Optional[Lead]:
    data = sanitize_lead_fields(fields)
    if not data.get("status"):
        data.pop("status", None)

    try:
        db_lead = Lead.model_validate({**data, "owner_id": owner_id})
    except ValidationError:
        logger.warning("Rejected lead with invalid fields: %s", sorted(data))
        return None

    refs = {"pipeline_id": db_lead.pipeline_id, "stage_id": db_lead.stage_id}
    stage = _check_references(session, owner_id, refs)
    db_lead.stage_id = refs.get("stage_id")
    db_lead.pipeline_id = stage.pipeline_id if stage else refs.get("pipeline_id")

    try:
        session.add(db_lead)
        session.commit()
        session.refresh(db_lead)
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed to create lead %r", data.get("name"))
        return None

    logger.info("Created lead %s", db_lead.id)
    leads_changed.emit(entity="lead", action="created", id=db_lead.id)
    return db_lead

def _apply_stage_rules(session: Session, db_lead: Lead, update_data: Dict[str, Any]) -> None:
    """Keep status and stage_id describing the same stage.

    Moving a lead to another stage copies that stage's name into status.
    A status change sent together with the lead's current stage is
    replaced by that stage's name. Setting a status by itself re-points
    stage_id at the stage of that name in the lead's pipeline, when there
    is one.
    """
    stage = _check_references(session, db_lead.owner_id, update_data)
    if stage is not None:
        new_status = update_data.get("status", db_lead.status)
        if stage.id != db_lead.stage_id or new_status != db_lead.status:
            update_data["status"] = stage.name
        update_data["pipeline_id"] = stage.pipeline_id
        return

    new_status = update_data.get("status")
    if "stage_id" in update_data or not new_status or new_status == db_lead.status:
        return

    pipeline_id = update_data.get("pipeline_id") or db_lead.pipeline_id
    if not pipeline_id:
        return
    for stage in pipelines_service.get_stages(session, db_lead.owner_id, pipeline_id):
        if stage.name == new_status:
            update_data["stage_id"] = stage.id
            break

def update_lead(session: Session, owner_id: uuid.UUID, lead_id: uuid.UUID, fields: Dict[str, Any]) -> Optional[Lead]:
    db_lead = get_lead(session, owner_id, lead_id)
    if not db_lead:
        return None

    try:
        update_data = LeadUpdate.model_validate(sanitize_lead_fields(fields)).model_dump(exclude_unset=True)
    except ValidationError:
        logger.warning("Rejected update for lead %s: invalid fields", lead_id)
        return None

    for key in REQUIRED_COLUMNS + TEXT_COLUMNS:
        if key in update_data and update_data[key] is None:
            del update_data[key]

    _apply_stage_rules(session, db_lead, update_data)

    for key, value in update_data.items():
        setattr(db_lead, key, value)

    try:
        session.add(db_lead)
        session.commit()
        session.refresh(db_lead)
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed to update lead %s", lead_id)
        return None

    leads_changed.emit(entity="lead", action="updated", id=db_lead.id)
    return db_lead

def update_leads(session: Session, owner_id: uuid.UUID, lead_ids: Iterable[uuid.UUID], fields: Dict[str, Any]) -> List[Lead]:
    # One request per lead, like the bulk actions in the management table
    updated = []
    for lead_id in lead_ids:
        db_lead = update_lead(session, owner_id, lead_id, fields)
        if db_lead:
            updated.append(db_lead)
    return updated

def delete_lead(session: Session, owner_id: uuid.UUID, lead_id: uuid.UUID) -> bool:
    db_lead = get_lead(session, owner_id, lead_id)
    if not db_lead:
        return False

    try:
        session.delete(db_lead)
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed to delete lead %s", lead_id)
        return False

    logger.info("Deleted lead %s", lead_id)
    leads_changed.emit(entity="lead", action="deleted", id=lead_id)
    return True

def delete_leads(session: Session, owner_id: uuid.UUID, lead_ids: Iterable[uuid.UUID]) -> int:
    lead_ids = list(lead_ids)
    if not lead_ids:
        return 0

    try:
        leads = session.exec(
            select(Lead)
            .where(Lead.owner_id == owner_id)
            .where(Lead.id.in_(lead_ids))
        ).all()
        for db_lead in leads:
            session.delete(db_lead)
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed to delete %d leads", len(lead_ids))
        return 0

    if leads:
        logger.info("Deleted %d leads", len(leads))
        leads_changed.emit(entity="lead", action="deleted", ids=[l.id for l in leads])
    return len(leads)

class _Placement:
    """Resolves pipeline/stage references for incoming records, caching lookups."""

    def __init__(self, session: Session, owner_id: uuid.UUID):
        self.session = session
        self.owner_id = owner_id
        self.pipeline_ids = {p.id for p in pipelines_service.get_pipelines(session, owner_id)}
        self.default_pipeline = None
        self._stages: Dict[uuid.UUID, List[Stage]] = {}

    def stages(self, pipeline_id: uuid.UUID) -> List[Stage]:
        if pipeline_id not in self._stages:
            self._stages[pipeline_id] = pipelines_service.get_stages(self.session, self.owner_id, pipeline_id)
        return self._stages[pipeline_id]

    def default(self):
        if self.default_pipeline is None:
            self.default_pipeline = pipelines_service.ensure_default_pipeline(self.session, self.owner_id)
            if self.default_pipeline is not None:
                self.pipeline_ids.add(self.default_pipeline.id)
        return self.default_pipeline

    def resolve(self, data: Dict[str, Any]) -> bool:
        pipeline_id = as_uuid(data.get("pipeline_id"))
        if pipeline_id not in self.pipeline_ids:
            default = self.default()
            if default is None:
                return False
            pipeline_id = default.id

        stages = self.stages(pipeline_id)
        stage_id = as_uuid(data.get("stage_id"))
        stage = next((s for s in stages if s.id == stage_id), None)
        if stage is None:
            stage = stages[0] if stages else None

        data["pipeline_id"] = pipeline_id
        data["stage_id"] = stage.id if stage else None
        if not data.get("status"):
            data["status"] = stage.name if stage else DEFAULT_STATUS
        return True

def add_leads_bulk(session: Session, owner_id: uuid.UUID, leads: List[Dict[str, Any]]) -> List[Lead]:
    """Insert many leads in one commit.

    Every record ends up in a pipeline the tenant owns: unknown pipelines
    are replaced by the default one and missing stages by the first stage
    of the resolved pipeline. Either all records are stored or none.
    """
    if not leads:
        return []

    placement = _Placement(session, owner_id)
    db_leads = []
    for record in leads:
        data = sanitize_lead_fields(record)
        if not placement.resolve(data):
            logger.error("No pipeline available for bulk insert of %d leads", len(leads))
            return []
        try:
            db_leads.append(Lead.model_validate({**data, "owner_id": owner_id}))
        except ValidationError:
            logger.warning("Rejected bulk insert: invalid lead %r", data.get("name"))
            return []

    try:
        session.add_all(db_leads)
        session.commit()
        for db_lead in db_leads:
            session.refresh(db_lead)
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed to bulk insert %d leads", len(db_leads))
        return []

    logger.info("Bulk inserted %d leads", len(db_leads))
    leads_changed.emit(entity="lead", action="created", ids=[l.id for l in db_leads])
    return db_leads
