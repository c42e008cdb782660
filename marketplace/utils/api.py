# --- marketplace/utils/api.py ---
from flask import jsonify


def api_ok(**payload):
    return {"success": True, **payload}


def api_error(message, **extra):
    return {"success": False, "error": message, **extra}


# unified response helpers
def ok(status_code=200, **payload):
    resp = jsonify(api_ok(**payload))
    resp.status_code = status_code
    return resp


def err(message, status_code=400, **extra):
    resp = jsonify(api_error(message, **extra))
    resp.status_code = status_code
    return resp
