import pytest

from leadhive.normalizer import extract_contact_fields, normalize_field_value

@pytest.mark.parametrize("value, expected", [
    (None, ""),
    ("Jane Doe", "Jane Doe"),
    (42, "42"),
    (3.5, "3.5"),
    ({"first": "Jane", "last": "Doe"}, "Jane Doe"),
    ({"prefix": "Dr", "first": "Jane", "middle": "", "last": "Doe", "suffix": "PhD"}, "Dr Jane Doe PhD"),
    ({"last": "Doe"}, "Doe"),
    ({"area": "022", "phone": "5551234"}, "(022) 5551234"),
    ({"area": "", "phone": "5551234"}, "5551234"),
    ({"phone": "5551234"}, "5551234"),
    ({"addr_line1": "1 Main St", "addr_line2": "", "city": "Pune", "postal": "411001"}, "1 Main St, Pune, 411001"),
    ({"addr_line1": "1 Main St", "city": "Pune", "state": "MH", "country": "India"}, "1 Main St, Pune, MH, India"),
])
def test_normalize_field_value(value, expected):
    assert normalize_field_value(value) == expected

def test_unknown_objects_fall_back_to_json():
    assert normalize_field_value({"foo": "bar"}) == '{"foo":"bar"}'
    assert normalize_field_value(["a", "b"]) == '["a","b"]'

def test_normalization_is_idempotent_on_strings():
    for value in ["", "  spaced  ", "(022) 5551234", "1 Main St, Pune", '{"foo":"bar"}']:
        once = normalize_field_value(value)
        assert normalize_field_value(once) == once

def test_structured_values_never_leave_double_separators():
    name = normalize_field_value({"first": "Jane", "middle": "", "last": "Doe"})
    assert "  " not in name
    address = normalize_field_value({"addr_line1": "1 Main St", "addr_line2": "", "city": "", "state": "MH"})
    assert address == "1 Main St, MH"
    assert ", ," not in address

CUSTOM_FIELDS = [
    {"id": "f1", "label": "Full Name", "type": "text"},
    {"id": "f2", "label": "Work Email", "type": "email"},
    {"id": "f3", "label": "Mobile", "type": "tel"},
    {"id": "f4", "label": "Company Name", "type": "text"},
    {"id": "f5", "label": "Message", "type": "textarea"},
]

def test_extract_contact_fields_by_type_and_label():
    fields = extract_contact_fields(CUSTOM_FIELDS, {
        "f1": {"first": "Jane", "last": "Doe"},
        "f2": "jane@example.com",
        "f3": {"area": "022", "phone": "5551234"},
        "f4": "Acme",
    })
    assert fields == {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "phone": "(022) 5551234",
        "company": "Acme",
    }

def test_extract_contact_fields_label_fallbacks():
    custom_fields = [
        {"id": "a", "label": "Who are you", "type": "text"},
        {"id": "b", "label": "Email address", "type": "text"},
        {"id": "c", "label": "Phone number", "type": "text"},
    ]
    fields = extract_contact_fields(custom_fields, {"a": "Ravi", "b": "ravi@example.com", "c": "98765"})
    # No label mentions "name", so the first field is used
    assert fields["name"] == "Ravi"
    assert fields["email"] == "ravi@example.com"
    assert fields["phone"] == "98765"
    assert fields["company"] == ""

def test_extract_contact_fields_missing_name_is_unknown():
    assert extract_contact_fields(CUSTOM_FIELDS, {})["name"] == "Unknown"
    assert extract_contact_fields([], {"x": "y"})["name"] == "Unknown"
