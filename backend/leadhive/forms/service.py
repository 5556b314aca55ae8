import logging
from typing import Any, Dict, List, Optional
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select
import uuid

from leadhive.contacts import service as contacts_service
from leadhive.contacts.models import Contact
from leadhive.forms.models import LeadForm
from leadhive.forms.schemas import FormCreate
from leadhive.normalizer import extract_contact_fields

logger = logging.getLogger(__name__)

COUNTERS = ("visits", "submissions")


def create_form(session: Session, owner_id: uuid.UUID, form_create: FormCreate) -> Optional[LeadForm]:
    db_form = LeadForm(
        owner_id=owner_id,
        name=form_create.name,
        custom_fields=[f.model_dump() for f in form_create.custom_fields]
    )
    try:
        session.add(db_form)
        session.commit()
        session.refresh(db_form)
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed to create form %r", form_create.name)
        return None

    logger.info("Created form %s", db_form.id)
    return db_form

def get_forms(session: Session, owner_id: uuid.UUID) -> List[LeadForm]:
    try:
        return list(session.exec(
            select(LeadForm)
            .where(LeadForm.owner_id == owner_id)
            .order_by(LeadForm.created_at.desc())
        ).all())
    except SQLAlchemyError:
        logger.exception("Failed to load forms for %s", owner_id)
        return []

def get_form(session: Session, owner_id: uuid.UUID, form_id: uuid.UUID) -> Optional[LeadForm]:
    try:
        return session.exec(
            select(LeadForm)
            .where(LeadForm.id == form_id)
            .where(LeadForm.owner_id == owner_id)
        ).first()
    except SQLAlchemyError:
        logger.exception("Failed to load form %s", form_id)
        return None

def get_public_form(session: Session, form_id: uuid.UUID) -> Optional[LeadForm]:
    """Look a form up without a tenant; used by the unauthenticated endpoints."""
    try:
        return session.get(LeadForm, form_id)
    except SQLAlchemyError:
        logger.exception("Failed to load form %s", form_id)
        return None

def update_form(session: Session, owner_id: uuid.UUID, form_id: uuid.UUID, fields: Dict[str, Any]) -> Optional[LeadForm]:
    db_form = get_form(session, owner_id, form_id)
    if not db_form:
        return None

    if fields.get("name"):
        db_form.name = fields["name"]
    if fields.get("custom_fields") is not None:
        # Assign a new list so the JSON column is flagged as changed
        db_form.custom_fields = [dict(f) for f in fields["custom_fields"]]

    try:
        session.add(db_form)
        session.commit()
        session.refresh(db_form)
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed to update form %s", form_id)
        return None
    return db_form

def set_jotform(session: Session, db_form: LeadForm, jotform_id: str, jotform_url: str) -> Optional[LeadForm]:
    db_form.jotform_id = jotform_id
    db_form.jotform_url = jotform_url
    try:
        session.add(db_form)
        session.commit()
        session.refresh(db_form)
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed to store Jotform link on form %s", db_form.id)
        return None
    return db_form

def delete_form(session: Session, owner_id: uuid.UUID, form_id: uuid.UUID) -> bool:
    # Contacts keep their form_id and form_name; they are soft references
    db_form = get_form(session, owner_id, form_id)
    if not db_form:
        return False

    try:
        session.delete(db_form)
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed to delete form %s", form_id)
        return False

    logger.info("Deleted form %s", form_id)
    return True

def _increment(session: Session, form_id: uuid.UUID, counter: str) -> Optional[int]:
    # Read-modify-write: the new value comes from what this session last
    # read, so two requests at once may both write the same value and one
    # increment is lost. The write only applies when it raises the stored
    # value, so a stale read never lowers the counter.
    db_form = get_public_form(session, form_id)
    if not db_form:
        return None

    column = getattr(LeadForm, counter)
    new_value = (getattr(db_form, counter) or 0) + 1
    try:
        session.execute(
            update(LeadForm)
            .where(LeadForm.id == form_id)
            .where(column < new_value)
            .values({counter: new_value})
        )
        session.commit()
        session.refresh(db_form)
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed to increment %s on form %s", counter, form_id)
        return None
    return getattr(db_form, counter)

def increment_form_visits(session: Session, form_id: uuid.UUID) -> Optional[int]:
    return _increment(session, form_id, "visits")

def increment_form_submissions(session: Session, form_id: uuid.UUID) -> Optional[int]:
    return _increment(session, form_id, "submissions")

def submit_form(session: Session, form_id: uuid.UUID, form_data: Dict[str, Any]) -> Optional[Contact]:
    """Store a public submission as a contact of the form's owner."""
    db_form = get_public_form(session, form_id)
    if not db_form:
        return None

    contact_fields = extract_contact_fields(db_form.custom_fields, form_data)
    contact = contacts_service.add_contact(session, db_form.owner_id, {
        **contact_fields,
        "form_id": db_form.id,
        "form_name": db_form.name,
        "form_data": form_data,
    })
    if not contact:
        return None

    increment_form_submissions(session, db_form.id)
    return contact
