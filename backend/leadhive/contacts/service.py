import json
import logging
from typing import Any, Dict, List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select
import uuid

from leadhive.contacts.models import Contact
from leadhive.events import leads_changed
from leadhive.forms.models import LeadForm
from leadhive.leads import service as leads_service
from leadhive.leads.models import DEFAULT_STATUS, Lead
from leadhive.normalizer import normalize_field_value
from leadhive.pipelines import service as pipelines_service

logger = logging.getLogger(__name__)

DISPLAY_FIELDS = ("name", "email", "phone", "company")
NOTE_HINTS = ("note", "message")

# Lead columns an operator may fill in while converting a contact
CONVERSION_EXTRAS = ("interested_service", "budget", "assigned_to", "priority", "next_follow_up", "notes")


def _display_value(value: Any) -> Any:
    # Older rows may hold a structured answer serialized as JSON text
    if isinstance(value, str):
        text = value.strip()
        if not (text.startswith("{") and text.endswith("}")):
            return value
        try:
            parsed = json.loads(text)
        except ValueError:
            return value
        if not isinstance(parsed, dict):
            return value
        return normalize_field_value(parsed)
    return normalize_field_value(value)

def _normalize_display_fields(contact: Contact) -> Contact:
    for key in DISPLAY_FIELDS:
        value = getattr(contact, key)
        if value is None:
            continue
        display = _display_value(value)
        if display != value:
            setattr(contact, key, display)
    return contact

def get_contacts(session: Session, owner_id: uuid.UUID) -> List[Contact]:
    try:
        contacts = session.exec(
            select(Contact)
            .where(Contact.owner_id == owner_id)
            .order_by(Contact.created_at.desc())
        ).all()
    except SQLAlchemyError:
        logger.exception("Failed to load contacts for %s", owner_id)
        return []
    return [_normalize_display_fields(c) for c in contacts]

def get_contact(session: Session, owner_id: uuid.UUID, contact_id: uuid.UUID) -> Optional[Contact]:
    try:
        contact = session.exec(
            select(Contact)
            .where(Contact.id == contact_id)
            .where(Contact.owner_id == owner_id)
        ).first()
    except SQLAlchemyError:
        logger.exception("Failed to load contact %s", contact_id)
        return None
    return _normalize_display_fields(contact) if contact else None

def add_contact(session: Session, owner_id: uuid.UUID, fields: Dict[str, Any]) -> Optional[Contact]:
    db_contact = Contact(
        owner_id=owner_id,
        name=normalize_field_value(fields.get("name")) or "Unknown",
        email=normalize_field_value(fields.get("email")),
        phone=normalize_field_value(fields.get("phone")),
        company=normalize_field_value(fields.get("company")),
        form_id=leads_service.as_uuid(fields.get("form_id")),
        form_name=fields.get("form_name") or "",
        form_data=dict(fields.get("form_data") or {}),
    )
    try:
        session.add(db_contact)
        session.commit()
        session.refresh(db_contact)
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed to create contact for form %s", fields.get("form_id"))
        return None

    logger.info("Created contact %s from form %s", db_contact.id, db_contact.form_id)
    leads_changed.emit(entity="contact", action="created", id=db_contact.id)
    return db_contact

def delete_contact(session: Session, owner_id: uuid.UUID, contact_id: uuid.UUID) -> bool:
    db_contact = get_contact(session, owner_id, contact_id)
    if not db_contact:
        return False

    try:
        session.delete(db_contact)
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed to delete contact %s", contact_id)
        return False

    leads_changed.emit(entity="contact", action="deleted", id=contact_id)
    return True

def derive_source(form_name: str) -> str:
    """Lead source for a form, e.g. "Website Contact Form" gives "Website (Form)"."""
    tokens = (form_name or "").split()
    platform = tokens[0] if tokens else "Unknown"
    return f"{platform} (Form)"

def _has_hint(text: str) -> bool:
    text = (text or "").lower()
    return any(hint in text for hint in NOTE_HINTS)

def extract_notes(form: Optional[LeadForm], form_data: Dict[str, Any]) -> str:
    """Best-effort pick of the free-text message a submitter left."""
    if form is not None:
        for field in form.custom_fields or []:
            if field.get("type") == "textarea" or _has_hint(field.get("label")):
                value = form_data.get(field.get("id"))
                if value:
                    return normalize_field_value(value)
                break

    for key, value in form_data.items():
        if _has_hint(key) and value:
            return normalize_field_value(value)
    return ""

def convert_contact(
    session: Session,
    owner_id: uuid.UUID,
    contact_id: uuid.UUID,
    pipeline_id: Optional[uuid.UUID],
    stage_id: Optional[uuid.UUID],
    extra: Optional[Dict[str, Any]] = None
) -> Optional[Lead]:
    """Turn a contact into a lead in the chosen pipeline/stage, then drop the contact.

    The lead insert and the contact delete are separate commits. If the
    delete fails the lead stays and so does the contact.
    """
    if not pipeline_id or not stage_id:
        return None

    contact = get_contact(session, owner_id, contact_id)
    if not contact:
        return None

    stage = pipelines_service.get_stage(session, owner_id, stage_id)
    if not stage or stage.pipeline_id != pipeline_id:
        logger.warning("Conversion of contact %s rejected: stage %s not in pipeline %s", contact_id, stage_id, pipeline_id)
        return None

    form = None
    if contact.form_id:
        form = session.get(LeadForm, contact.form_id)

    fields = {
        "name": contact.name,
        "email": contact.email,
        "phone": contact.phone or "",
        "company": contact.company or "",
        "source": derive_source(contact.form_name),
        "status": DEFAULT_STATUS,
        "pipeline_id": pipeline_id,
        "stage_id": stage_id,
        "notes": extract_notes(form, contact.form_data or {}),
    }
    for key, value in (extra or {}).items():
        if key in CONVERSION_EXTRAS and value not in (None, ""):
            fields[key] = value

    lead = leads_service.add_lead(session, owner_id, fields)
    if not lead:
        return None

    if not delete_contact(session, owner_id, contact_id):
        logger.error("Lead %s created but contact %s was not removed", lead.id, contact_id)
    return lead
