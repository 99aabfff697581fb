from flask_login import login_required

from ..http import api_ok
from ..services import get_dashboard_data
from . import api


@api.route("/dashboard/data", methods=["GET"])
@login_required
def dashboard_data():
    return api_ok(get_dashboard_data())
