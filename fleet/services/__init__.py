"""Service layer (business logic).

Routes stay thin: they parse the request, call one of these modules and
wrap the result with ``api_ok`` / ``api_list``.
"""

from .auth_service import permission_required, authenticate
from .upload_service import upload_generic, upload_avatar, validate_upload, delete_by_url
from .dashboard_service import get_dashboard_data
from . import (
    asset_service,
    auth_service,
    dashboard_service,
    equipment_service,
    hierarchy_service,
    maintenance_service,
    upload_service,
    vehicle_service,
)
