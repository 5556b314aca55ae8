"""Bare HTML rendering of a public form.

Styling lives in the front end; this page only has to post the right
field ids to ``/api/forms/{id}/submit``.
"""

from html import escape
from typing import List

from leadhive.config import settings
from leadhive.forms.models import LeadForm

NOT_FOUND_PAGE = (
    "<!DOCTYPE html><html><head><meta charset=\"UTF-8\"><title>Form Not Found</title></head>"
    "<body><h1>Form Not Found</h1><p>This form does not exist or has been deleted.</p></body></html>"
)


def _render_field(field: dict) -> str:
    field_id = escape(str(field.get("id", "")))
    label = escape(str(field.get("label", "")))
    required = " required" if field.get("required") else ""
    field_type = field.get("type") or "text"

    if field_type == "textarea":
        control = f'<textarea name="{field_id}" rows="4"{required}></textarea>'
    elif field_type == "select":
        options = "".join(
            f'<option value="{escape(str(o))}">{escape(str(o))}</option>' for o in field.get("options") or []
        )
        control = f'<select name="{field_id}"{required}><option value="">Select...</option>{options}</select>'
    else:
        control = f'<input type="{escape(field_type)}" name="{field_id}"{required} />'

    return f'<div class="form-group"><label>{label}</label>{control}</div>'


def render_form_page(form: LeadForm) -> str:
    fields: List[str] = [_render_field(f) for f in form.custom_fields or []]
    title = escape(form.name)
    submit_url = escape(f"{settings.PUBLIC_BASE_URL.rstrip('/')}/api/forms/{form.id}/submit")
    return (
        "<!DOCTYPE html><html lang=\"en\"><head><meta charset=\"UTF-8\">"
        f"<title>{title}</title></head><body>"
        f'<form id="leadhive-form" data-submit-url="{submit_url}">'
        f"<h1>{title}</h1>{''.join(fields)}<button type=\"submit\">Submit</button></form>"
        "</body></html>"
    )
