from unittest import mock

from fleet.realtime import DELETE, INSERT, UPDATE, ChangeEvent, ChangeFeed, DashboardStatsAggregator


def event(table, kind, **row):
    if kind == DELETE:
        return ChangeEvent(table, kind, old=row)
    return ChangeEvent(table, kind, new=row)


def test_insert_counts_totals_status_and_growth():
    agg = DashboardStatsAggregator()
    agg.apply(event("equipment", INSERT, id="e1", brand="CAT", model="D6", status="OPERATIONAL"))
    agg.apply(event("vehicles", INSERT, id="v1", plate_number="ABC-1", status="NON_OPERATIONAL"))
    agg.apply(event("clients", INSERT, id="c1", name="Acme"))
    agg.apply(event("maintenance_vehicle_reports", INSERT, id="r1", issue_description="Brakes", status="REPORTED"))

    stats = agg.snapshot()["overviewStats"]
    assert stats["equipment"] == {"total": 1, "operational": 1, "nonOperational": 0}
    assert stats["vehicles"] == {"total": 1, "operational": 0, "nonOperational": 1}
    assert stats["clients"] == 1
    assert stats["maintenanceReports"] == {"total": 1, "pending": 1, "inProgress": 0}
    assert stats["growth"]["newEquipmentThisWeek"] == 1
    assert stats["growth"]["newClientsThisWeek"] == 1


def test_status_transition_moves_one_count():
    agg = DashboardStatsAggregator()
    agg.apply(event("equipment", INSERT, id="e1", status="OPERATIONAL"))
    agg.apply(ChangeEvent("equipment", UPDATE, new={"id": "e1", "status": "NON_OPERATIONAL"},
                          old={"id": "e1", "status": "OPERATIONAL"}))
    assert agg.snapshot()["overviewStats"]["equipment"] == {"total": 1, "operational": 0, "nonOperational": 1}

    # no status change in old values: nothing moves
    agg.apply(ChangeEvent("equipment", UPDATE, new={"id": "e1", "brand": "X"}, old={"id": "e1", "brand": "Y"}))
    assert agg.snapshot()["overviewStats"]["equipment"]["nonOperational"] == 1


def test_counts_never_go_negative():
    agg = DashboardStatsAggregator()
    agg.apply(event("locations", DELETE, id="l1"))
    agg.apply(event("vehicles", DELETE, id="v1", status="OPERATIONAL"))
    agg.apply(ChangeEvent("maintenance_equipment_reports", UPDATE, new={"id": "r", "status": "IN_PROGRESS"},
                          old={"id": "r", "status": "REPORTED"}))
    stats = agg.snapshot()["overviewStats"]
    assert stats["locations"] == 0
    assert stats["vehicles"] == {"total": 0, "operational": 0, "nonOperational": 0}
    assert stats["maintenanceReports"] == {"total": 0, "pending": 0, "inProgress": 1}


def test_recent_activity_is_bounded_newest_first():
    agg = DashboardStatsAggregator(max_activity=3)
    for i in range(5):
        agg.apply(event("projects", INSERT, id=f"p{i}", name=f"Project {i}"))
    activity = agg.snapshot()["recentActivity"]
    assert [a["id"] for a in activity] == ["p4", "p3", "p2"]
    assert activity[0] == {
        "id": "p4",
        "type": "project",
        "action": "insert",
        "description": "Project 4",
        "timestamp": activity[0]["timestamp"],
    }


def test_attach_follows_feed():
    feed = ChangeFeed()
    agg = DashboardStatsAggregator()
    agg.load({**agg.snapshot()["overviewStats"], "locations": 4})
    agg.attach(feed)
    feed.publish(event("locations", INSERT, id="l5", address="Pier 5"))
    agg.detach()
    feed.publish(event("locations", INSERT, id="l6", address="Pier 6"))
    assert agg.snapshot()["overviewStats"]["locations"] == 5
    assert feed.subscriber_count() == 0


def test_dashboard_endpoint(super_client, project):
    super_client.post("/api/equipments", data={
        "brand": "CAT", "model": "D6", "type": "Dozer", "owner": "Acme",
        "projectId": project["project_id"], "status": "NON_OPERATIONAL",
    })
    data = super_client.get("/api/dashboard/data").get_json()

    assert data["equipmentCounts"] == {"OPERATIONAL": 0, "NON_OPERATIONAL": 1}
    stats = data["overviewStats"]
    assert stats["locations"] == 1
    assert stats["projects"] == 1
    assert stats["equipment"]["nonOperational"] == 1
    assert stats["growth"]["newEquipmentThisWeek"] == 1
    types = [a["type"] for a in data["recentActivity"]]
    assert "equipment" in types and "location" in types
    assert data["detailedData"]["equipment"][0]["brand"] == "CAT"


def test_dashboard_endpoint_degrades_to_zeros(super_client):
    with mock.patch("fleet.services.dashboard_service._build", side_effect=RuntimeError("db down")):
        data = super_client.get("/api/dashboard/data").get_json()
    assert data["overviewStats"]["equipment"]["total"] == 0
    assert data["recentActivity"] == []
