"""ORM models, one module per aggregate."""

from .user import User, USER_ACTIVE, USER_INACTIVE
from .hierarchy import Location, Client, Project
from .equipment import Equipment, ASSET_STATUSES, STATUS_OPERATIONAL, STATUS_NON_OPERATIONAL
from .vehicle import Vehicle
from .maintenance import (
    MaintenanceEquipmentReport,
    MaintenanceVehicleReport,
    PRIORITIES,
    PRIORITY_MEDIUM,
    REPORT_STATUSES,
    REPORT_REPORTED,
    REPORT_IN_PROGRESS,
    REPORT_COMPLETED,
)
