def test_location_crud_and_uniqueness(super_client):
    resp = super_client.post("/api/locations", json={"address": "  5 Dock St "})
    assert resp.status_code == 201
    loc = resp.get_json()
    assert loc["address"] == "5 Dock St"

    dup = super_client.post("/api/locations", json={"address": "5 dock st"})
    assert dup.status_code == 409
    assert dup.get_json()["error"]["message"] == "Location with this address already exists"

    bad = super_client.post("/api/locations", json={"address": "   "})
    assert bad.get_json()["error"]["message"] == "Address is required and must be a non-empty string"

    resp = super_client.put(f"/api/locations/{loc['id']}", json={"address": "6 Dock St"})
    assert resp.get_json()["address"] == "6 Dock St"

    listing = super_client.get("/api/locations").get_json()
    assert listing["total"] == 1
    assert listing["data"][0]["clients_count"] == 0

    assert super_client.delete(f"/api/locations/{loc['id']}").status_code == 200
    assert super_client.get(f"/api/locations/{loc['id']}").status_code == 404


def test_client_validation(super_client, project):
    resp = super_client.post("/api/clients", json={"name": "Acme", "location_id": project["location_id"]})
    assert resp.status_code == 409
    assert resp.get_json()["error"]["message"] == "Client with this name already exists in this location"

    resp = super_client.post("/api/clients", json={"name": "Other"})
    assert resp.get_json()["error"]["message"] == "Location is required"

    resp = super_client.post("/api/clients", json={"name": "Other", "location_id": "missing"})
    assert resp.get_json()["error"]["message"] == "Selected location does not exist"

    resp = super_client.post("/api/clients", json={"location_id": project["location_id"]})
    assert resp.get_json()["error"]["message"] == "Client name is required"


def test_project_validation(super_client, project):
    resp = super_client.post("/api/projects", json={"name": "bridge", "clientId": project["client_id"]})
    assert resp.status_code == 409

    resp = super_client.post("/api/projects", json={"name": "Tunnel"})
    assert resp.get_json()["error"]["message"] == "Client ID is required"

    resp = super_client.post("/api/projects", json={"name": "Tunnel", "client_id": "missing"})
    assert resp.status_code == 404
    assert resp.get_json()["error"]["message"] == "Client not found"

    resp = super_client.post("/api/projects", json={"name": "Tunnel", "client_id": project["client_id"]})
    assert resp.status_code == 201
    assert resp.get_json()["client"]["location"]["address"] == "12 Harbour Road"

    listing = super_client.get(f"/api/projects?clientId={project['client_id']}").get_json()
    assert listing["total"] == 2


def test_parent_with_children_cannot_be_deleted(super_client, project):
    resp = super_client.delete(f"/api/locations/{project['location_id']}")
    assert resp.status_code == 409
    assert resp.get_json()["error"]["message"] == (
        "Cannot delete location with existing clients. Please move or delete clients first."
    )

    resp = super_client.delete(f"/api/clients/{project['client_id']}")
    assert resp.status_code == 409


def test_admin_cannot_delete(admin_client, project):
    assert admin_client.delete(f"/api/projects/{project['project_id']}").status_code == 403


def test_list_paging(super_client):
    for i in range(3):
        super_client.post("/api/locations", json={"address": f"{i} Paging Rd"})
    listing = super_client.get("/api/locations?limit=2&offset=1").get_json()
    assert listing["total"] == 3
    assert [l["address"] for l in listing["data"]] == ["1 Paging Rd", "2 Paging Rd"]

    assert super_client.get("/api/locations?limit=abc").status_code == 400
