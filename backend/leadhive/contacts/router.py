from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session
from typing import List
import uuid

from leadhive.database import get_session
from leadhive.auth.router import get_current_user
from leadhive.users.models import User
from leadhive.contacts.schemas import ContactConvert, ContactRead
from leadhive.contacts import service
from leadhive.integrations import jotform
from leadhive.leads.schemas import LeadRead
from leadhive.pipelines import service as pipelines_service

router = APIRouter(prefix="/contacts", tags=["contacts"])

@router.get("/", response_model=List[ContactRead])
def read_contacts(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    return service.get_contacts(session, current_user.id)

@router.post("/sync/jotform", response_model=jotform.SyncResult)
def sync_jotform(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    client: jotform.JotformClient = Depends(jotform.get_jotform_client)
):
    return jotform.sync_jotform_submissions(session, current_user.id, client)

@router.get("/{contact_id}", response_model=ContactRead)
def read_contact(
    contact_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    contact = service.get_contact(session, current_user.id, contact_id)
    if not contact:
        raise HTTPException(status_code=404, detail="Contact not found")
    return contact

@router.delete("/{contact_id}")
def delete_contact(
    contact_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    if not service.get_contact(session, current_user.id, contact_id):
        raise HTTPException(status_code=404, detail="Contact not found")
    if not service.delete_contact(session, current_user.id, contact_id):
        raise HTTPException(status_code=500, detail="Internal server error")
    return {"ok": True}

@router.post("/{contact_id}/convert", response_model=LeadRead)
def convert_contact(
    contact_id: uuid.UUID,
    contact_convert: ContactConvert,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    if not service.get_contact(session, current_user.id, contact_id):
        raise HTTPException(status_code=404, detail="Contact not found")
    if not pipelines_service.get_pipeline(session, current_user.id, contact_convert.pipeline_id):
        raise HTTPException(status_code=404, detail="Pipeline not found")
    stage = pipelines_service.get_stage(session, current_user.id, contact_convert.stage_id)
    if not stage or stage.pipeline_id != contact_convert.pipeline_id:
        raise HTTPException(status_code=404, detail="Stage not found")

    lead = service.convert_contact(
        session,
        current_user.id,
        contact_id,
        contact_convert.pipeline_id,
        contact_convert.stage_id,
        extra=contact_convert.model_dump(exclude={"pipeline_id", "stage_id"}, exclude_none=True)
    )
    if not lead:
        raise HTTPException(status_code=500, detail="Internal server error")
    return lead
