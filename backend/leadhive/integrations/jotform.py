"""Jotform integration.

Publishes a LeadHive form as a Jotform form and pulls Jotform submissions
back in as contacts.

API docs: https://api.jotform.com/docs/
"""

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel
from sqlmodel import Session
import uuid

from leadhive.config import settings
from leadhive.contacts import service as contacts_service
from leadhive.forms import service as forms_service
from leadhive.forms.models import LeadForm
from leadhive.normalizer import extract_contact_fields

logger = logging.getLogger(__name__)

# Key under which the remote submission id is kept in Contact.form_data
SUBMISSION_ID_KEY = "jotform_submission_id"

QUESTION_TYPES = {
    "text": "control_textbox",
    "email": "control_email",
    "tel": "control_phone",
    "number": "control_number",
    "textarea": "control_textarea",
    "select": "control_dropdown",
}


class JotformError(Exception):
    pass


class JotformResult(BaseModel):
    success: bool
    url: Optional[str] = None
    error: Optional[str] = None


class SyncResult(BaseModel):
    success: bool
    new_contacts: int = 0
    error: Optional[str] = None


class JotformClient:
    """Thin synchronous client for the two Jotform calls we need."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = settings.JOTFORM_BASE_URL,
        timeout: float = settings.JOTFORM_TIMEOUT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _request(self, method: str, path: str, **kwargs) -> Any:
        with httpx.Client(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport,
            headers={"APIKEY": self.api_key or ""},
        ) as client:
            resp = client.request(method, path, **kwargs)
            resp.raise_for_status()
            data = resp.json()

        if data.get("responseCode") != 200:
            raise JotformError(data.get("message") or "Unexpected Jotform response")
        return data.get("content")

    def create_form(self, title: str, questions: List[Dict[str, Any]]) -> Dict[str, Any]:
        payload = {"properties[title]": title}
        for index, question in enumerate(questions):
            for key, value in question.items():
                payload[f"questions[{index}][{key}]"] = value
        return self._request("POST", "/user/forms", data=payload)

    def get_form_submissions(self, jotform_id: str) -> List[Dict[str, Any]]:
        return self._request("GET", f"/form/{jotform_id}/submissions", params={"limit": 1000}) or []


def get_jotform_client() -> JotformClient:
    return JotformClient(settings.JOTFORM_API_KEY)


def build_questions(custom_fields: List[dict]) -> List[Dict[str, Any]]:
    """Map form fields to Jotform questions; question order follows field order."""
    questions = []
    for index, field in enumerate(custom_fields, start=1):
        question = {
            "type": QUESTION_TYPES.get(field.get("type"), "control_textbox"),
            "text": field.get("label", ""),
            "order": str(index),
            "name": f"field{index}",
            "required": "Yes" if field.get("required") else "No",
        }
        if field.get("type") == "select" and field.get("options"):
            question["options"] = "|".join(field["options"])
        questions.append(question)

    questions.append({
        "type": "control_button",
        "text": "Submit",
        "order": str(len(custom_fields) + 1),
        "name": "submit",
    })
    return questions


def map_answers(custom_fields: List[dict], answers: Dict[str, Any]) -> Dict[str, Any]:
    """Key a Jotform submission's answers by the local field ids.

    Answers are matched by question order first, then by label.
    """
    by_label = {str(f.get("label", "")).strip().lower(): f for f in custom_fields}
    form_data = {}
    for answer in answers.values():
        if not isinstance(answer, dict) or "answer" not in answer:
            continue

        field = None
        try:
            position = int(answer.get("order", 0)) - 1
        except (TypeError, ValueError):
            position = -1
        if 0 <= position < len(custom_fields):
            field = custom_fields[position]
        if field is None or str(field.get("label", "")).strip().lower() != str(answer.get("text", "")).strip().lower():
            field = by_label.get(str(answer.get("text", "")).strip().lower(), field)
        if field is None:
            continue

        form_data[field["id"]] = answer["answer"]
    return form_data


def create_jotform(session: Session, owner_id: uuid.UUID, form_id: uuid.UUID, client: JotformClient) -> JotformResult:
    db_form = forms_service.get_form(session, owner_id, form_id)
    if not db_form:
        return JotformResult(success=False, error="Form not found")
    if not client.configured:
        return JotformResult(success=False, error="Jotform API key is not configured")

    try:
        content = client.create_form(db_form.name, build_questions(db_form.custom_fields or []))
    except (httpx.HTTPError, JotformError, ValueError) as e:
        logger.error("Jotform form creation failed for form %s: %s", form_id, e)
        return JotformResult(success=False, error=str(e) or "Failed to create form")

    content = content or {}
    jotform_id = str(content.get("id", ""))
    jotform_url = content.get("url") or f"https://form.jotform.com/{jotform_id}"
    if not forms_service.set_jotform(session, db_form, jotform_id, jotform_url):
        return JotformResult(success=False, error="Internal server error")

    logger.info("Published form %s as Jotform %s", form_id, jotform_id)
    return JotformResult(success=True, url=jotform_url)


def _synced_submission_ids(session: Session, owner_id: uuid.UUID) -> set:
    return {
        str(c.form_data.get(SUBMISSION_ID_KEY))
        for c in contacts_service.get_contacts(session, owner_id)
        if c.form_data and c.form_data.get(SUBMISSION_ID_KEY)
    }


def _sync_form(session: Session, db_form: LeadForm, client: JotformClient, seen: set) -> int:
    created = 0
    custom_fields = db_form.custom_fields or []
    for submission in client.get_form_submissions(db_form.jotform_id):
        submission_id = str(submission.get("id", ""))
        if not submission_id or submission_id in seen:
            continue

        form_data = map_answers(custom_fields, submission.get("answers") or {})
        form_data[SUBMISSION_ID_KEY] = submission_id
        contact = contacts_service.add_contact(session, db_form.owner_id, {
            **extract_contact_fields(custom_fields, form_data),
            "form_id": db_form.id,
            "form_name": db_form.name,
            "form_data": form_data,
        })
        if contact:
            seen.add(submission_id)
            forms_service.increment_form_submissions(session, db_form.id)
            created += 1
    return created


def sync_jotform_submissions(session: Session, owner_id: uuid.UUID, client: JotformClient) -> SyncResult:
    if not client.configured:
        return SyncResult(success=False, error="Jotform API key is not configured")

    seen = _synced_submission_ids(session, owner_id)
    new_contacts = 0
    for db_form in forms_service.get_forms(session, owner_id):
        if not db_form.jotform_id:
            continue
        try:
            new_contacts += _sync_form(session, db_form, client, seen)
        except (httpx.HTTPError, JotformError, ValueError) as e:
            logger.error("Jotform sync failed for form %s: %s", db_form.id, e)
            return SyncResult(success=False, new_contacts=new_contacts, error=str(e) or "Sync failed")

    logger.info("Jotform sync created %d contacts for %s", new_contacts, owner_id)
    return SyncResult(success=True, new_contacts=new_contacts)
