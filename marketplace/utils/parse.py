# marketplace/utils/parse.py
from datetime import datetime, timezone


def parse_bool(v, default=False):
    if v is None:
        return default
    if isinstance(v, bool):
        return v
    return str(v).strip().lower() in {"1", "true", "yes", "y", "on"}


def parse_opt_bool(v):
    if v is None:
        return None
    return parse_bool(v)


def parse_opt_int(v):
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, str) and v.strip().lower() in {"", "null"}:
        return None
    try:
        return int(v)
    except (TypeError, ValueError):
        return None


def parse_opt_float(v):
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, str) and v.strip() == "":
        return None
    try:
        return float(v)
    except (TypeError, ValueError):
        return None


def blank(v) -> bool:
    """True for values a client sends to mean "not provided"."""
    return v is None or (isinstance(v, str) and not v.strip())


def parse_iso8601(s: str | None):
    if not s:
        return None
    s = str(s).strip()
    # support trailing 'Z' (UTC)
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        return None
    if dt.tzinfo:
        return dt.astimezone(timezone.utc).replace(tzinfo=None)  # store naive UTC
    return dt


def iso(dt):
    return dt.isoformat() if dt else None


def parse_money(v):
    """Strict money caster for patches: raises ValueError on garbage."""
    if isinstance(v, bool):
        raise ValueError("boolean is not money")
    n = float(v)
    if n != n or n in (float("inf"), float("-inf")):
        raise ValueError("not a finite number")
    return round(n, 2)


def parse_list(v):
    if not isinstance(v, list):
        raise ValueError("expected a list")
    return v


def apply_fields(obj, data: dict, fields):
    """
    COALESCE-style patch: every field present with a non-null value is cast
    and assigned, absent or null fields keep the stored value.
    """
    changed = []
    for field, caster in fields:
        if data.get(field) is None:
            continue
        try:
            setattr(obj, field, caster(data[field]))
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid value for {field}") from e
        changed.append(field)
    return changed
