import pytest

from fleet.errors import ValidationError
from fleet.services.maintenance_service import clean_attachment_urls, clean_parts, validate_report


@pytest.fixture()
def equipment_id(app, super_client, project):
    resp = super_client.post("/api/equipments", data={
        "brand": "CAT", "model": "D6", "type": "Dozer", "owner": "Acme", "projectId": project["project_id"],
    })
    return resp.get_json()["id"]


def test_validation_messages():
    with pytest.raises(ValidationError, match="Issue description is required"):
        validate_report({"issue_description": "  "})
    with pytest.raises(ValidationError, match="Remarks too long"):
        validate_report({"issue_description": "x", "remarks": "r" * 501})
    with pytest.raises(ValidationError, match="Downtime hours description too long"):
        validate_report({"issue_description": "x", "downtimeHours": "1" * 51})


def test_defaults_on_create():
    out = validate_report({"issueDescription": "Leak"})
    assert out["priority"] == "MEDIUM"
    assert out["status"] == "REPORTED"
    assert out["parts_replaced"] == []
    assert out["attachment_urls"] == []


def test_partial_validation_only_touches_given_fields():
    assert validate_report({"remarks": "ok"}, partial=True) == {"remarks": "ok"}


@pytest.mark.parametrize("part, message", [
    ("", "Part description cannot be empty"),
    ("p" * 256, "Part description too long"),
    ("https://files/x.png", "Part description cannot contain URLs"),
    ("bolt from supplier.COM", "Part description cannot contain URLs"),
])
def test_part_rules(part, message):
    with pytest.raises(ValidationError, match=message):
        clean_parts([part])


def test_part_limits():
    assert clean_parts([" filter ", "belt"]) == ["filter", "belt"]
    with pytest.raises(ValidationError, match="Too many parts listed"):
        clean_parts(["p"] * 51)


def test_attachment_rules():
    assert clean_attachment_urls(["https://cdn/x.pdf"]) == ["https://cdn/x.pdf"]
    with pytest.raises(ValidationError, match="Invalid URL format"):
        clean_attachment_urls(["not a url"])
    with pytest.raises(ValidationError, match="URL too long"):
        clean_attachment_urls(["https://cdn/" + "a" * 500])
    with pytest.raises(ValidationError, match="Too many attachments"):
        clean_attachment_urls(["https://cdn/x"] * 21)


def test_report_crud(super_client, equipment_id, project):
    resp = super_client.post("/api/equipments/maintenance-reports", json={"issue_description": "Leak"})
    assert resp.status_code == 400
    assert resp.get_json()["error"]["message"] == "Equipment ID and Issue Description are required"

    resp = super_client.post("/api/equipments/maintenance-reports", json={
        "equipment_id": equipment_id,
        "issue_description": "Track tension",
        "parts_replaced": ["track adjuster"],
        "status": "IN_PROGRESS",
        "repaired_by": None,
    })
    assert resp.status_code == 201
    report = resp.get_json()
    assert report["equipment"]["id"] == equipment_id
    assert report["location"]["id"] == project["location_id"]

    me = super_client.get("/api/auth/me").get_json()
    # repaired_by only sticks once completed
    out = super_client.put(f"/api/equipments/maintenance-reports/{report['id']}", json={"repaired_by": me["id"]}).get_json()
    assert out["repaired_by"] is None
    out = super_client.put(f"/api/equipments/maintenance-reports/{report['id']}", json={
        "status": "COMPLETED", "repaired_by": me["id"], "date_repaired": "2025-05-01T10:00:00Z",
    }).get_json()
    assert out["repaired_user"]["id"] == me["id"]
    assert out["date_repaired"] == "2025-05-01T10:00:00"

    listing = super_client.get(f"/api/equipments/maintenance-reports?equipmentId={equipment_id}").get_json()
    assert listing["total"] == 1
    assert listing["permissions"]["can_delete"] is True

    found = super_client.get("/api/equipments/maintenance-reports/search-parts?q=adjuster").get_json()
    assert [r["id"] for r in found["data"]] == [report["id"]]

    assert super_client.delete(f"/api/equipments/maintenance-reports/{report['id']}").status_code == 200
    assert super_client.get(f"/api/equipments/maintenance-reports/{report['id']}").status_code == 404


def test_unknown_repairer_is_rejected(super_client, equipment_id):
    resp = super_client.post("/api/equipments/maintenance-reports", json={
        "equipment_id": equipment_id, "issue_description": "x", "repaired_by": "ghost",
    })
    assert resp.status_code == 400


def test_vehicle_reports_are_separate(super_client, equipment_id):
    resp = super_client.post("/api/vehicles/maintenance-reports", json={
        "vehicle_id": equipment_id, "issue_description": "Wrong table",
    })
    assert resp.status_code == 404
    assert resp.get_json()["error"]["message"] == "Vehicle not found"
    assert super_client.get("/api/vehicles/maintenance-reports").get_json()["total"] == 0


def _report(client, equipment_id, **fields):
    resp = client.post("/api/equipments/maintenance-reports", json={
        "equipment_id": equipment_id, "issue_description": "Leak", **fields,
    })
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()


def test_search_parts_matches_names_not_json_text(super_client, equipment_id):
    umlaut = _report(super_client, equipment_id, parts_replaced=["Dichtungsring Ö-12"])
    _report(super_client, equipment_id, parts_replaced=["air filter", "oil filter"])

    found = super_client.get("/api/equipments/maintenance-reports/search-parts", query_string={"q": "ö-12"}).get_json()
    assert [r["id"] for r in found["data"]] == [umlaut["id"]]

    assert super_client.get("/api/equipments/maintenance-reports/search-parts?q=%2C").get_json()["data"] == []
    assert len(super_client.get("/api/equipments/maintenance-reports/search-parts?q=FILTER").get_json()["data"]) == 1
    assert super_client.get("/api/equipments/maintenance-reports/search-parts?q=").status_code == 400


def test_location_must_exist(super_client, equipment_id, project):
    resp = super_client.post("/api/equipments/maintenance-reports", json={
        "equipment_id": equipment_id, "issue_description": "x", "location_id": "nowhere",
    })
    assert resp.status_code == 400
    assert resp.get_json()["error"]["message"] == "Invalid location ID"

    report = _report(super_client, equipment_id, location_id=project["location_id"])
    resp = super_client.put(f"/api/equipments/maintenance-reports/{report['id']}", json={"location_id": "nowhere"})
    assert resp.status_code == 400


def test_export_filters_by_date_and_status(super_client, equipment_id):
    _report(super_client, equipment_id, date_reported="2025-01-10T08:00:00Z", priority="HIGH")
    late = _report(super_client, equipment_id, date_reported="2025-02-28T23:30:00Z", status="COMPLETED")
    _report(super_client, equipment_id, date_reported="2025-03-05T08:00:00Z")

    out = super_client.get(
        "/api/equipments/maintenance-reports/export?startDate=2025-02-01&endDate=2025-02-28"
    ).get_json()
    assert out["totalRecords"] == 1
    assert out["format"] == "json"
    assert out["filename"].startswith("equipment-maintenance-reports-") and out["filename"].endswith(".json")
    assert out["filters"]["startDate"] == "2025-02-01T00:00:00"

    [row] = out["reports"]
    assert row["id"] == late["id"]
    assert row["equipment"] == "CAT D6"
    assert row["project"] == "Bridge"
    assert row["client"] == "Acme"
    assert row["location"] == "12 Harbour Road"
    assert row["reportedBy"] == super_client.get("/api/auth/me").get_json()["full_name"]
    assert row["repairedBy"] == "Not assigned"

    out = super_client.get("/api/equipments/maintenance-reports/export?priority=HIGH").get_json()
    assert out["totalRecords"] == 1

    listing = super_client.get("/api/equipments/maintenance-reports?startDate=2025-03-01").get_json()
    assert listing["total"] == 1


def test_export_rejects_bad_input(super_client, equipment_id):
    resp = super_client.get("/api/equipments/maintenance-reports/export?format=xlsx")
    assert resp.status_code == 400
    assert resp.get_json()["error"]["message"] == "Unsupported export format: xlsx"

    resp = super_client.get("/api/equipments/maintenance-reports/export?startDate=yesterday")
    assert resp.status_code == 400
    assert resp.get_json()["error"]["message"] == "startDate must be a valid date"
