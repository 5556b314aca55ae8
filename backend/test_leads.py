import uuid
from datetime import date

from fastapi.testclient import TestClient
from sqlmodel import Session

from leadhive.leads import service
from leadhive.pipelines import service as pipelines_service
from leadhive.users.models import User

def test_sanitize_drops_unknown_keys_and_blanks():
    clean = service.sanitize_lead_fields({
        "name": "Meera",
        "email": None,
        "budget": "",
        "next_follow_up": "  ",
        "assigned_to": "",
        "pipeline_id": "",
        "stage_id": "",
        "notes": "",
        "pipeline_name": "Main Pipeline",
        "stage_color": "#fff",
        "id": "abc",
    })
    assert clean == {
        "name": "Meera",
        "email": "",
        "budget": None,
        "next_follow_up": None,
        "assigned_to": None,
        "pipeline_id": None,
        "stage_id": None,
        "notes": "",
    }

def test_add_lead_assigns_id_and_timestamp(session: Session, owner: User, signals):
    lead = service.add_lead(session, owner.id, {
        "name": "Meera",
        "email": "meera@example.com",
        "phone": "98765",
        "budget": "",
        "next_follow_up": "2030-01-15",
        "unexpected": "dropped",
    })
    assert lead is not None
    assert isinstance(lead.id, uuid.UUID)
    assert lead.created_at is not None
    assert lead.status == "New"
    assert lead.budget is None
    assert lead.next_follow_up == date(2030, 1, 15)
    assert signals == [{"entity": "lead", "action": "created", "id": lead.id}]

def test_add_lead_rejects_invalid_fields(session: Session, owner: User, signals):
    assert service.add_lead(session, owner.id, {"name": "Bad", "budget": "lots"}) is None
    assert service.get_leads(session, owner.id) == []
    assert signals == []

def test_get_leads_newest_first(session: Session, owner: User):
    for name in ["first", "second", "third"]:
        service.add_lead(session, owner.id, {"name": name})
    assert [l.name for l in service.get_leads(session, owner.id)] == ["third", "second", "first"]
    assert [l.name for l in service.get_leads(session, owner.id, skip=1, limit=1)] == ["second"]

def test_kanban_move_keeps_status_in_sync(session: Session, owner: User):
    pipeline = pipelines_service.ensure_default_pipeline(session, owner.id)
    stages = pipelines_service.get_stages(session, owner.id, pipeline.id)
    lead = service.add_lead(session, owner.id, {
        "name": "Dev", "status": stages[0].name, "pipeline_id": pipeline.id, "stage_id": stages[0].id
    })

    service.update_lead(session, owner.id, lead.id, {"status": stages[3].name, "stage_id": stages[3].id})
    moved = service.get_lead(session, owner.id, lead.id)
    assert moved.stage_id == stages[3].id
    assert moved.status == stages[3].name

    # A mismatched label is corrected to the target stage's name
    service.update_lead(session, owner.id, lead.id, {"status": "Something else", "stage_id": stages[1].id})
    moved = service.get_lead(session, owner.id, lead.id)
    assert moved.status == stages[1].name

def test_status_sent_with_current_stage_follows_stage(session: Session, owner: User):
    pipeline = pipelines_service.ensure_default_pipeline(session, owner.id)
    stages = pipelines_service.get_stages(session, owner.id, pipeline.id)
    lead = service.add_lead(session, owner.id, {
        "name": "Dev", "status": stages[0].name, "pipeline_id": pipeline.id, "stage_id": stages[0].id
    })

    service.update_lead(session, owner.id, lead.id, {"status": stages[2].name, "stage_id": stages[0].id})
    stored = service.get_lead(session, owner.id, lead.id)
    assert stored.stage_id == stages[0].id
    assert stored.status == stages[0].name

def test_unchanged_status_is_kept_on_current_stage(session: Session, owner: User):
    pipeline = pipelines_service.ensure_default_pipeline(session, owner.id)
    stage = pipelines_service.get_stages(session, owner.id, pipeline.id)[1]
    lead = service.add_lead(session, owner.id, {
        "name": "Converted", "status": "New", "pipeline_id": pipeline.id, "stage_id": stage.id
    })

    updated = service.update_lead(session, owner.id, lead.id, {"status": "New", "stage_id": stage.id, "notes": "x"})
    assert updated.status == "New"
    assert updated.notes == "x"

def test_update_ignores_other_tenants_stage(session: Session, owner: User, other_owner: User):
    pipeline = pipelines_service.ensure_default_pipeline(session, owner.id)
    stage = pipelines_service.get_stages(session, owner.id, pipeline.id)[0]
    theirs = pipelines_service.ensure_default_pipeline(session, other_owner.id)
    their_stage = pipelines_service.get_stages(session, other_owner.id, theirs.id)[3]
    lead = service.add_lead(session, owner.id, {
        "name": "Dev", "status": stage.name, "pipeline_id": pipeline.id, "stage_id": stage.id
    })

    updated = service.update_lead(session, owner.id, lead.id, {
        "stage_id": their_stage.id, "pipeline_id": theirs.id, "priority": "Low"
    })
    assert updated.stage_id == stage.id
    assert updated.pipeline_id == pipeline.id
    assert updated.status == stage.name
    assert updated.priority == "Low"

    updated = service.update_lead(session, owner.id, lead.id, {"stage_id": uuid.uuid4()})
    assert updated.stage_id == stage.id

def test_add_lead_drops_unowned_references(session: Session, owner: User, other_owner: User):
    theirs = pipelines_service.ensure_default_pipeline(session, other_owner.id)
    their_stage = pipelines_service.get_stages(session, other_owner.id, theirs.id)[0]

    lead = service.add_lead(session, owner.id, {
        "name": "Sneaky", "pipeline_id": theirs.id, "stage_id": their_stage.id
    })
    assert lead.pipeline_id is None
    assert lead.stage_id is None

    mine = pipelines_service.ensure_default_pipeline(session, owner.id)
    my_stage = pipelines_service.get_stages(session, owner.id, mine.id)[2]
    lead = service.add_lead(session, owner.id, {"name": "Placed", "stage_id": str(my_stage.id)})
    assert lead.stage_id == my_stage.id
    assert lead.pipeline_id == mine.id

def test_status_change_repoints_stage(session: Session, owner: User):
    pipeline = pipelines_service.ensure_default_pipeline(session, owner.id)
    stages = pipelines_service.get_stages(session, owner.id, pipeline.id)
    lead = service.add_lead(session, owner.id, {
        "name": "Dev", "status": stages[0].name, "pipeline_id": pipeline.id, "stage_id": stages[0].id
    })

    updated = service.update_lead(session, owner.id, lead.id, {"status": "Qualified"})
    assert updated.stage_id == stages[2].id

def test_move_to_stage_of_other_pipeline_moves_pipeline(session: Session, owner: User):
    main = pipelines_service.ensure_default_pipeline(session, owner.id)
    other = pipelines_service.create_pipeline(session, owner.id, "Renewals")
    target = pipelines_service.create_stage(session, owner.id, other.id, "Due")
    lead = service.add_lead(session, owner.id, {"name": "Sam", "pipeline_id": main.id})

    updated = service.update_lead(session, owner.id, lead.id, {"stage_id": target.id})
    assert updated.pipeline_id == other.id
    assert updated.status == "Due"

def test_partial_update_ignores_nulls_for_required_columns(session: Session, owner: User):
    lead = service.add_lead(session, owner.id, {"name": "Asha", "budget": 1000})
    updated = service.update_lead(session, owner.id, lead.id, {"name": None, "budget": "", "priority": "High"})
    assert updated.name == "Asha"
    assert updated.budget is None
    assert updated.priority == "High"

def test_update_and_delete_missing_lead(session: Session, owner: User):
    missing = uuid.uuid4()
    assert service.get_lead(session, owner.id, missing) is None
    assert service.update_lead(session, owner.id, missing, {"name": "x"}) is None
    assert service.delete_lead(session, owner.id, missing) is False

def test_bulk_delete_and_update(session: Session, owner: User, other_owner: User):
    mine = [service.add_lead(session, owner.id, {"name": f"lead {i}"}) for i in range(3)]
    theirs = service.add_lead(session, other_owner.id, {"name": "not yours"})

    updated = service.update_leads(session, owner.id, [mine[0].id, mine[1].id], {"assigned_to": "Ravi"})
    assert {l.assigned_to for l in updated} == {"Ravi"}

    assert service.delete_leads(session, owner.id, [mine[0].id, mine[1].id, theirs.id]) == 2
    assert [l.id for l in service.get_leads(session, owner.id)] == [mine[2].id]
    assert service.get_lead(session, other_owner.id, theirs.id) is not None

def test_bulk_insert_reassigns_unknown_pipeline(session: Session, owner: User):
    created = service.add_leads_bulk(session, owner.id, [
        {"name": "Imported", "pipeline_id": str(uuid.uuid4())},
        {"name": "No pipeline"},
    ])
    assert len(created) == 2

    default = pipelines_service.ensure_default_pipeline(session, owner.id)
    first_stage = pipelines_service.get_stages(session, owner.id, default.id)[0]
    for lead in created:
        assert lead.pipeline_id == default.id
        assert lead.stage_id == first_stage.id
        assert lead.status == first_stage.name
    assert len(pipelines_service.get_pipelines(session, owner.id)) == 1

def test_bulk_insert_keeps_valid_references(session: Session, owner: User):
    pipeline = pipelines_service.ensure_default_pipeline(session, owner.id)
    stage = pipelines_service.get_stages(session, owner.id, pipeline.id)[2]

    created = service.add_leads_bulk(session, owner.id, [
        {"name": "Placed", "pipeline_id": str(pipeline.id), "stage_id": str(stage.id), "status": stage.name},
    ])
    assert created[0].pipeline_id == pipeline.id
    assert created[0].stage_id == stage.id

def test_bulk_insert_is_all_or_nothing(session: Session, owner: User):
    created = service.add_leads_bulk(session, owner.id, [
        {"name": "Good"},
        {"name": "Bad", "budget": "not a number"},
    ])
    assert created == []
    assert service.get_leads(session, owner.id) == []

def test_lead_api_crud(client: TestClient, headers):
    response = client.post("/leads/", json={
        "name": "Anil",
        "email": "anil@example.com",
        "phone": "12345",
        "budget": "",
        "next_follow_up": "",
        "priority": "High",
    }, headers=headers)
    assert response.status_code == 200
    lead = response.json()
    assert lead["budget"] is None
    assert lead["status"] == "New"

    response = client.patch(f"/leads/{lead['id']}", json={"budget": 90000}, headers=headers)
    assert response.status_code == 200
    assert response.json()["budget"] == 90000

    response = client.get("/leads/", params={"status": "New"}, headers=headers)
    assert [l["id"] for l in response.json()] == [lead["id"]]

    assert client.delete(f"/leads/{lead['id']}", headers=headers).status_code == 200
    assert client.get(f"/leads/{lead['id']}", headers=headers).status_code == 404
    assert client.patch(f"/leads/{lead['id']}", json={"name": "x"}, headers=headers).status_code == 404

def test_lead_api_move(client: TestClient, headers):
    pipeline = client.post("/pipelines/default", headers=headers).json()
    enquiry, contacted = pipeline["stages"][0], pipeline["stages"][1]
    lead = client.post("/leads/", json={
        "name": "Neha", "pipeline_id": pipeline["id"], "stage_id": enquiry["id"], "status": enquiry["name"]
    }, headers=headers).json()

    response = client.post(f"/leads/{lead['id']}/move", json={"stage_id": contacted["id"]}, headers=headers)
    assert response.status_code == 200
    assert response.json()["stage_id"] == contacted["id"]
    assert response.json()["status"] == "Contacted"

    response = client.post(f"/leads/{lead['id']}/move", json={"stage_id": str(uuid.uuid4())}, headers=headers)
    assert response.status_code == 404

def test_lead_api_bulk_actions(client: TestClient, headers):
    response = client.post("/leads/bulk", json=[{"name": "A"}, {"name": "B"}, {"name": "C"}], headers=headers)
    assert response.status_code == 200
    ids = [l["id"] for l in response.json()]
    assert all(l["pipeline_id"] for l in response.json())

    response = client.post("/leads/bulk-update", json={"ids": ids[:2], "changes": {"status": "Payment Done"}}, headers=headers)
    assert response.json() == {"count": 2}

    response = client.post("/leads/bulk-delete", json={"ids": ids}, headers=headers)
    assert response.json() == {"count": 3}
    assert client.get("/leads/", headers=headers).json() == []
