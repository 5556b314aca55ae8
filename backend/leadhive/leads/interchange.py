"""JSON import/export of a tenant's leads.

The interchange document is a plain JSON array of lead objects, the same
shape ``GET /leads`` returns. Importing a record whose ``id`` matches an
existing lead updates that lead in place; every other record is inserted
with a fresh id through ``add_leads_bulk``.
"""

import logging
from typing import Any, Dict, List
from sqlmodel import Session
import uuid

from leadhive.leads import service
from leadhive.leads.schemas import ImportResult, LeadRead

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "leadhive_export.json"


def export_leads(session: Session, owner_id: uuid.UUID) -> List[Dict[str, Any]]:
    return [
        LeadRead.model_validate(lead, from_attributes=True).model_dump(mode="json")
        for lead in service.get_leads(session, owner_id)
    ]

def import_leads(session: Session, owner_id: uuid.UUID, records: Any) -> ImportResult:
    if not isinstance(records, list):
        raise ValueError("Expected an array of leads")
    if not all(isinstance(record, dict) for record in records):
        raise ValueError("Every lead must be a JSON object")

    result = ImportResult()
    new_records = []
    for record in records:
        lead_id = service.as_uuid(record.get("id"))
        if lead_id and service.get_lead(session, owner_id, lead_id):
            if service.update_lead(session, owner_id, lead_id, record):
                result.updated += 1
            else:
                logger.warning("Import could not update lead %s", lead_id)
        else:
            new_records.append(record)

    if new_records:
        result.created = len(service.add_leads_bulk(session, owner_id, new_records))

    logger.info("Imported leads: %d created, %d updated", result.created, result.updated)
    return result
