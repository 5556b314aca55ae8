import logging
from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import HTMLResponse, JSONResponse
from sqlmodel import Session
from typing import Any, Dict, List
import uuid

from leadhive.database import get_session
from leadhive.auth.router import get_current_user
from leadhive.users.models import User
from leadhive.forms.schemas import FormCreate, FormRead, FormSubmission, FormUpdate, PublicFormRead
from leadhive.forms.render import NOT_FOUND_PAGE, render_form_page
from leadhive.forms import service
from leadhive.integrations import jotform

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/forms", tags=["forms"])

# Unauthenticated endpoints used by the published forms
public_router = APIRouter(tags=["public forms"])

@router.get("/", response_model=List[FormRead])
def read_forms(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    return service.get_forms(session, current_user.id)

@router.post("/", response_model=FormRead)
def create_form(
    form_create: FormCreate,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    form = service.create_form(session, current_user.id, form_create)
    if not form:
        raise HTTPException(status_code=500, detail="Internal server error")
    return form

@router.get("/{form_id}", response_model=FormRead)
def read_form(
    form_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    form = service.get_form(session, current_user.id, form_id)
    if not form:
        raise HTTPException(status_code=404, detail="Form not found")
    return form

@router.put("/{form_id}", response_model=FormRead)
def update_form(
    form_id: uuid.UUID,
    form_update: FormUpdate,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    if not service.get_form(session, current_user.id, form_id):
        raise HTTPException(status_code=404, detail="Form not found")
    form = service.update_form(session, current_user.id, form_id, form_update.model_dump(exclude_unset=True))
    if not form:
        raise HTTPException(status_code=500, detail="Internal server error")
    return form

@router.delete("/{form_id}")
def delete_form(
    form_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    if not service.get_form(session, current_user.id, form_id):
        raise HTTPException(status_code=404, detail="Form not found")
    if not service.delete_form(session, current_user.id, form_id):
        raise HTTPException(status_code=500, detail="Internal server error")
    return {"ok": True}

@router.post("/{form_id}/jotform", response_model=jotform.JotformResult)
def create_jotform(
    form_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    client: jotform.JotformClient = Depends(jotform.get_jotform_client)
):
    if not service.get_form(session, current_user.id, form_id):
        raise HTTPException(status_code=404, detail="Form not found")
    return jotform.create_jotform(session, current_user.id, form_id, client)

@public_router.post("/api/forms/{form_id}/submit", response_model=FormSubmission)
def submit_form(
    form_id: uuid.UUID,
    form_data: Dict[str, Any] = Body(...),
    session: Session = Depends(get_session)
):
    if not service.get_public_form(session, form_id):
        return JSONResponse(status_code=404, content={"message": "Form not found"})

    if not service.submit_form(session, form_id, form_data):
        logger.error("Form submission failed for form %s", form_id)
        return JSONResponse(status_code=500, content={"message": "Internal server error"})
    return FormSubmission(message="Form submitted successfully")

@public_router.get("/f/{form_id}", response_model=PublicFormRead)
def read_public_form(form_id: uuid.UUID, session: Session = Depends(get_session)):
    form = service.get_public_form(session, form_id)
    if not form:
        raise HTTPException(status_code=404, detail="Form not found")
    service.increment_form_visits(session, form_id)
    return PublicFormRead(id=form.id, name=form.name, custom_fields=form.custom_fields)

@public_router.get("/form-render/{form_id}", response_class=HTMLResponse)
def render_public_form(form_id: uuid.UUID, session: Session = Depends(get_session)):
    form = service.get_public_form(session, form_id)
    if not form:
        return HTMLResponse(content=NOT_FOUND_PAGE, status_code=404)
    service.increment_form_visits(session, form_id)
    return HTMLResponse(content=render_form_page(form))
