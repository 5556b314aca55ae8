"""Flatten submitted form values into display strings.

Third-party form builders send structured answers (a name split into
first/last, a phone number split into area code and number, a postal
address split into lines). Contacts only store plain strings, so every
value that feeds ``name``, ``email``, ``phone`` or ``company`` goes through
``normalize_field_value`` first.
"""

import json
from typing import Any, Dict, List, Optional

NAME_PARTS = ("prefix", "first", "middle", "last", "suffix")
ADDRESS_PARTS = ("addr_line1", "addr_line2", "city", "state", "postal", "country")


def _join_parts(value: Dict[str, Any], keys, separator: str) -> str:
    parts = []
    for key in keys:
        part = value.get(key)
        if part is None:
            continue
        part = str(part).strip()
        if part:
            parts.append(part)
    return separator.join(parts)


def normalize_field_value(value: Any) -> str:
    if value is None:
        return ""

    if isinstance(value, dict):
        if "first" in value or "last" in value:
            return _join_parts(value, NAME_PARTS, " ")

        if "area" in value or "phone" in value:
            area = value.get("area")
            phone = "" if value.get("phone") is None else str(value.get("phone"))
            if area:
                return f"({area}) {phone}"
            return phone

        if "addr_line1" in value:
            return _join_parts(value, ADDRESS_PARTS, ", ")

        return json.dumps(value, separators=(",", ":"))

    if isinstance(value, (list, tuple, bool)):
        return json.dumps(value, separators=(",", ":"))

    return str(value)


def _find_field(custom_fields: List[dict], predicate) -> Optional[dict]:
    for field in custom_fields:
        if predicate(field):
            return field
    return None


def _label(field: dict) -> str:
    return str(field.get("label") or "").lower()


def extract_contact_fields(custom_fields: List[dict], form_data: Dict[str, Any]) -> Dict[str, str]:
    """Pick name/email/phone/company out of a submission by field label and type."""
    custom_fields = custom_fields or []

    name_field = _find_field(custom_fields, lambda f: "name" in _label(f))
    if name_field is None and custom_fields:
        name_field = custom_fields[0]

    email_field = _find_field(custom_fields, lambda f: f.get("type") == "email") or _find_field(
        custom_fields, lambda f: "email" in _label(f)
    )
    phone_field = _find_field(custom_fields, lambda f: f.get("type") == "tel") or _find_field(
        custom_fields, lambda f: "phone" in _label(f)
    )
    company_field = _find_field(custom_fields, lambda f: "company" in _label(f))

    def value_of(field: Optional[dict]) -> str:
        if field is None:
            return ""
        return normalize_field_value(form_data.get(field.get("id")))

    return {
        "name": value_of(name_field) or "Unknown",
        "email": value_of(email_field),
        "phone": value_of(phone_field),
        "company": value_of(company_field),
    }
