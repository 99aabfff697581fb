# fleet/http.py
from flask import jsonify

from .permissions import permissions_for


def api_ok(data=None, status=200, headers=None):
    resp = jsonify(data if data is not None else {})
    resp.status_code = status
    if headers:
        for k, v in headers.items():
            resp.headers[k] = str(v)
    return resp


def api_error(status, code, message, details=None):
    payload = {"error": {"code": code, "message": message}}
    if details is not None:
        payload["error"]["details"] = details
    resp = jsonify(payload)
    resp.status_code = status
    return resp


def api_list(items, total, user=None, resource=None):
    """List envelope shared by the asset/report/hierarchy endpoints."""
    payload = {"data": items, "total": total}
    if user is not None:
        payload["user_role"] = user.role
        if resource:
            payload["permissions"] = permissions_for(user.role, resource)
    return api_ok(payload)
