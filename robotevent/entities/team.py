from __future__ import annotations

from .object_model import ObjectModel, TYPE_STRING, TYPE_DATE


class Team(ObjectModel):
    """A team registered for an event."""

    definition = {
        "table": "team",
        "primary": "team_id",
        "fields": {
            "name": {"type": TYPE_STRING, "required": True, "validate": "is_generic_name", "size": 255},
            "email": {"type": TYPE_STRING, "required": True, "validate": "is_email", "size": 255},
            "website": {"type": TYPE_STRING, "required": False, "validate": "is_url"},
            "slogan": {"type": TYPE_STRING, "required": False, "validate": "is_string"},
            "institution": {"type": TYPE_STRING, "required": False, "validate": "is_string"},
            "country": {"type": TYPE_STRING, "required": False, "validate": "is_string"},
            "state": {"type": TYPE_STRING, "required": False, "validate": "is_string"},
            "city": {"type": TYPE_STRING, "required": False, "validate": "is_string"},
            "image": {"type": TYPE_STRING, "required": False},
            "date_add": {"type": TYPE_DATE, "validate": "is_date"},
            "date_upd": {"type": TYPE_DATE, "validate": "is_date"},
        },
    }
