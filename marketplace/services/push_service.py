# marketplace/services/push_service.py
import requests
from flask import current_app
from sqlalchemy import or_

from ..model import User


def _push_tokens(identifiers):
    """Stored push tokens for users addressed by numeric id or firebase_uid."""
    ids, uids = [], []
    for ident in identifiers:
        if ident is None or ident == "":
            continue
        if isinstance(ident, int) and not isinstance(ident, bool):
            ids.append(ident)
        elif isinstance(ident, str) and ident.strip().isdigit():
            ids.append(int(ident))
        else:
            uids.append(str(ident))
    if not ids and not uids:
        return []

    clauses = []
    if ids:
        clauses.append(User.id.in_(ids))
    if uids:
        clauses.append(User.firebase_uid.in_(uids))
    users = User.query.filter(or_(*clauses)).all()
    return [u.push_token for u in users if u.push_token]


def _message(token, title, body, data):
    return {
        "to": token,
        "title": title,
        "body": body,
        "data": data,
        "sound": "default",
        "priority": "high",
    }


def _post(messages):
    resp = requests.post(
        current_app.config["EXPO_PUSH_URL"],
        json=messages,
        headers={"Accept": "application/json"},
        timeout=current_app.config.get("HTTP_TIMEOUT", 10),
    )
    resp.raise_for_status()
    tickets = resp.json().get("data") or []
    return tickets if isinstance(tickets, list) else [tickets]


def send_push_to_user(user_id, title, body, data=None):
    tokens = _push_tokens([user_id])
    if not tokens:
        current_app.logger.warning("No push token found for user %s", user_id)
        return {"success": False, "message": "No push token found"}

    try:
        tickets = _post([_message(tokens[0], title, body, data)])
    except (requests.RequestException, ValueError) as e:
        current_app.logger.error("Error sending push notification to user %s: %s", user_id, e)
        return {"success": False, "error": str(e)}

    failed = [t for t in tickets if isinstance(t, dict) and t.get("status") == "error"]
    if failed:
        current_app.logger.error("Expo push error: %s", failed[0].get("message"))
        return {"success": False, "error": failed[0].get("message")}

    current_app.logger.info("Push notification sent to user %s", user_id)
    return {"success": True}


def send_push_to_users(user_ids, title, body, data=None):
    tokens = _push_tokens(user_ids)
    if not tokens:
        current_app.logger.warning("No push tokens found for any users")
        return {"success": False, "message": "No push tokens found"}

    try:
        tickets = _post([_message(t, title, body, data) for t in tokens])
    except (requests.RequestException, ValueError) as e:
        current_app.logger.error("Error sending push notifications: %s", e)
        return {"success": False, "error": str(e)}

    failed = sum(1 for t in tickets if isinstance(t, dict) and t.get("status") == "error")
    current_app.logger.info("Push notifications sent to %d users (%d rejected)", len(tokens), failed)
    return {"success": True, "sent": len(tokens), "failed": failed}
