"""Live dashboard counters fed by change events."""

import copy
import logging
import threading
from typing import Dict, List, Optional

from .events import DELETE, INSERT, UPDATE, ChangeEvent

log = logging.getLogger(__name__)

ASSET_STATUS_BUCKETS = {"OPERATIONAL": "operational", "NON_OPERATIONAL": "nonOperational"}
REPORT_STATUS_BUCKETS = {"REPORTED": "pending", "IN_PROGRESS": "inProgress"}

REPORT_TABLES = ("maintenance_equipment_reports", "maintenance_vehicle_reports")

# table -> (stats section, growth counter, activity type)
TABLES = {
    "locations": ("locations", None, "location"),
    "clients": ("clients", "newClientsThisWeek", "client"),
    "projects": ("projects", "newProjectsThisWeek", "project"),
    "equipment": ("equipment", "newEquipmentThisWeek", "equipment"),
    "vehicles": ("vehicles", "newVehiclesThisWeek", "vehicle"),
    "maintenance_equipment_reports": ("maintenanceReports", None, "maintenance_report"),
    "maintenance_vehicle_reports": ("maintenanceReports", None, "maintenance_report"),
}


def empty_overview_stats() -> Dict:
    return {
        "locations": 0,
        "clients": 0,
        "projects": 0,
        "equipment": {"total": 0, "operational": 0, "nonOperational": 0},
        "vehicles": {"total": 0, "operational": 0, "nonOperational": 0},
        "maintenanceReports": {"total": 0, "pending": 0, "inProgress": 0},
        "growth": {
            "newClientsThisWeek": 0,
            "newProjectsThisWeek": 0,
            "newEquipmentThisWeek": 0,
            "newVehiclesThisWeek": 0,
        },
    }


def _describe(activity_type: str, row: Dict) -> str:
    for key in ("name", "address", "plate_number", "issue_description"):
        if row.get(key):
            return str(row[key])
    if row.get("brand") or row.get("model"):
        return f"{row.get('brand') or ''} {row.get('model') or ''}".strip()
    return activity_type


class DashboardStatsAggregator:
    def __init__(self, stats: Optional[Dict] = None, max_activity: int = 20):
        self._lock = threading.Lock()
        self.stats = copy.deepcopy(stats) if stats else empty_overview_stats()
        self.recent_activity: List[Dict] = []
        self.max_activity = max_activity
        self._subs = []

    def load(self, stats: Dict, recent_activity: Optional[List[Dict]] = None) -> None:
        with self._lock:
            self.stats = copy.deepcopy(stats)
            if recent_activity is not None:
                self.recent_activity = list(recent_activity)[: self.max_activity]

    def snapshot(self) -> Dict:
        with self._lock:
            return {
                "overviewStats": copy.deepcopy(self.stats),
                "recentActivity": list(self.recent_activity),
            }

    def attach(self, feed) -> None:
        for table in TABLES:
            self._subs.append(feed.subscribe(table, self.apply))

    def detach(self) -> None:
        for sub in self._subs:
            sub.unsubscribe()
        self._subs = []

    def apply(self, event: ChangeEvent) -> None:
        spec = TABLES.get(event.table)
        if spec is None:
            return
        section, growth_key, activity_type = spec

        with self._lock:
            if event.event_type == INSERT:
                self._bump(section, 1)
                self._bump_status(event.table, section, event.new.get("status"), 1)
                if growth_key:
                    self.stats["growth"][growth_key] += 1
            elif event.event_type == UPDATE:
                old_status = event.old.get("status")
                new_status = event.new.get("status")
                if "status" in event.old and old_status != new_status:
                    self._bump_status(event.table, section, old_status, -1)
                    self._bump_status(event.table, section, new_status, 1)
            elif event.event_type == DELETE:
                self._bump(section, -1)
                self._bump_status(event.table, section, event.old.get("status"), -1)

            row = event.new or event.old
            self.recent_activity.insert(0, {
                "id": event.record_id,
                "type": activity_type,
                "action": event.event_type.lower(),
                "description": _describe(activity_type, row),
                "timestamp": event.commit_timestamp,
            })
            del self.recent_activity[self.max_activity:]

    def _bump(self, section: str, delta: int) -> None:
        value = self.stats[section]
        if isinstance(value, dict):
            value["total"] = max(0, value["total"] + delta)
        else:
            self.stats[section] = max(0, value + delta)

    def _bump_status(self, table: str, section: str, status: Optional[str], delta: int) -> None:
        if not status:
            return
        buckets = REPORT_STATUS_BUCKETS if table in REPORT_TABLES else ASSET_STATUS_BUCKETS
        bucket = buckets.get(status)
        if bucket is None or not isinstance(self.stats.get(section), dict):
            return
        counts = self.stats[section]
        counts[bucket] = max(0, counts[bucket] + delta)
