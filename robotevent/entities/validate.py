from __future__ import annotations

# Field validators referenced by name from ObjectModel definitions.
import re
from datetime import datetime

from pydantic import AnyHttpUrl, TypeAdapter, ValidationError

_EMAIL_RE = re.compile(r"^[a-z0-9!#$%&'*+/=?^`{}|~_-]+[.a-z0-9!#$%&'*+/=?^`{}|~_-]*@[a-z0-9]+[._a-z0-9-]*\.[a-z0-9]+$", re.I)
_HTTP_URL = TypeAdapter(AnyHttpUrl)
_GENERIC_NAME_BAD = re.compile(r"[<>={}]")


def is_string(value) -> bool:
    return isinstance(value, str)


def is_generic_name(value) -> bool:
    return is_string(value) and not _GENERIC_NAME_BAD.search(value)


def is_email(value) -> bool:
    return is_string(value) and bool(_EMAIL_RE.match(value))


def is_url(value) -> bool:
    if not is_string(value):
        return False
    try:
        _HTTP_URL.validate_python(value)
    except ValidationError:
        return False
    return True


def is_date(value) -> bool:
    if not is_string(value):
        return False
    for fmt in ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d"):
        try:
            datetime.strptime(value, fmt)
            return True
        except ValueError:
            continue
    return False


def is_bool(value) -> bool:
    return isinstance(value, bool) or value in (0, 1, "0", "1")


def is_int(value) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, str) and bool(re.fullmatch(r"[+-]?\d+", value))


def is_unsigned_int(value) -> bool:
    return is_int(value) and int(value) >= 0


def is_float(value) -> bool:
    if isinstance(value, bool):
        return False
    try:
        float(value)
        return True
    except (TypeError, ValueError):
        return False


VALIDATORS = {
    "is_string": is_string,
    "is_generic_name": is_generic_name,
    "is_email": is_email,
    "is_url": is_url,
    "is_date": is_date,
    "is_bool": is_bool,
    "is_int": is_int,
    "is_unsigned_int": is_unsigned_int,
    "is_float": is_float,
}


def get_validator(name: str):
    try:
        return VALIDATORS[name]
    except KeyError:
        raise ValueError(f"unknown validator: {name}") from None
