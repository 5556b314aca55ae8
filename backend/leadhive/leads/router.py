import json
from fastapi import APIRouter, Body, Depends, File, HTTPException, Query, UploadFile
from fastapi.responses import JSONResponse
from sqlmodel import Session
from typing import Any, Dict, List, Optional
import uuid

from leadhive.database import get_session
from leadhive.auth.router import get_current_user
from leadhive.users.models import User
from leadhive.leads.schemas import (
    BulkDelete,
    BulkResult,
    BulkUpdate,
    ImportResult,
    LeadCreate,
    LeadMove,
    LeadRead,
    LeadUpdate,
)
from leadhive.leads import interchange, service
from leadhive.pipelines import service as pipelines_service

router = APIRouter(prefix="/leads", tags=["leads"])

def _internal_error():
    return HTTPException(status_code=500, detail="Internal server error")

@router.get("/", response_model=List[LeadRead])
def read_leads(
    skip: int = 0,
    limit: Optional[int] = None,
    status: Optional[str] = Query(None),
    pipeline_id: Optional[uuid.UUID] = Query(None),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    return service.get_leads(session, current_user.id, skip, limit, status, pipeline_id)

@router.post("/", response_model=LeadRead)
def create_lead(
    lead_create: LeadCreate,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    lead = service.add_lead(session, current_user.id, lead_create.model_dump())
    if not lead:
        raise _internal_error()
    return lead

# Fixed paths are declared before /{lead_id} so they are not parsed as ids

@router.get("/export")
def export_leads(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    return JSONResponse(
        content=interchange.export_leads(session, current_user.id),
        headers={"Content-Disposition": f'attachment; filename="{interchange.EXPORT_FILENAME}"'}
    )

def _run_import(session: Session, owner_id: uuid.UUID, records: Any) -> ImportResult:
    try:
        return interchange.import_leads(session, owner_id, records)
    except ValueError:
        raise HTTPException(status_code=400, detail="Error importing leads")

@router.post("/import", response_model=ImportResult)
def import_leads(
    records: Any = Body(...),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    return _run_import(session, current_user.id, records)

@router.post("/import/file", response_model=ImportResult)
def import_leads_file(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    try:
        records = json.loads(file.file.read().decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        raise HTTPException(status_code=400, detail="Error importing leads")
    return _run_import(session, current_user.id, records)

@router.post("/bulk", response_model=List[LeadRead])
def create_leads_bulk(
    leads: List[Dict[str, Any]],
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    created = service.add_leads_bulk(session, current_user.id, leads)
    if leads and not created:
        raise _internal_error()
    return created

@router.post("/bulk-delete", response_model=BulkResult)
def delete_leads_bulk(
    bulk_delete: BulkDelete,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    return BulkResult(count=service.delete_leads(session, current_user.id, bulk_delete.ids))

@router.post("/bulk-update", response_model=BulkResult)
def update_leads_bulk(
    bulk_update: BulkUpdate,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    changes = bulk_update.changes.model_dump(exclude_unset=True)
    updated = service.update_leads(session, current_user.id, bulk_update.ids, changes)
    return BulkResult(count=len(updated))

@router.get("/{lead_id}", response_model=LeadRead)
def read_lead(
    lead_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    lead = service.get_lead(session, current_user.id, lead_id)
    if not lead:
        raise HTTPException(status_code=404, detail="Lead not found")
    return lead

@router.patch("/{lead_id}", response_model=LeadRead)
def update_lead(
    lead_id: uuid.UUID,
    lead_update: LeadUpdate,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    if not service.get_lead(session, current_user.id, lead_id):
        raise HTTPException(status_code=404, detail="Lead not found")

    lead = service.update_lead(session, current_user.id, lead_id, lead_update.model_dump(exclude_unset=True))
    if not lead:
        raise _internal_error()
    return lead

@router.post("/{lead_id}/move", response_model=LeadRead)
def move_lead(
    lead_id: uuid.UUID,
    lead_move: LeadMove,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Kanban drop: put the lead in another stage."""
    if not service.get_lead(session, current_user.id, lead_id):
        raise HTTPException(status_code=404, detail="Lead not found")
    stage = pipelines_service.get_stage(session, current_user.id, lead_move.stage_id)
    if not stage:
        raise HTTPException(status_code=404, detail="Stage not found")

    lead = service.update_lead(
        session,
        current_user.id,
        lead_id,
        {"status": stage.name, "stage_id": stage.id, "pipeline_id": stage.pipeline_id}
    )
    if not lead:
        raise _internal_error()
    return lead

@router.delete("/{lead_id}")
def delete_lead(
    lead_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    if not service.get_lead(session, current_user.id, lead_id):
        raise HTTPException(status_code=404, detail="Lead not found")
    if not service.delete_lead(session, current_user.id, lead_id):
        raise _internal_error()
    return {"ok": True}
