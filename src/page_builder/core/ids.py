"""Unique element identifiers."""

import itertools
import secrets

# Random per-process token keeps ids apart from those issued by earlier sessions
# and stored in page documents.
_SESSION_TOKEN = secrets.token_hex(3)
_counter = itertools.count(1)


def create_id(component_type: str) -> str:
    """Return a new id of the form ``<type>_<suffix>``, unique for this process."""
    if not component_type:
        msg = "component type must be a non-empty string"
        raise ValueError(msg)
    return f"{component_type}_{_SESSION_TOKEN}{next(_counter):x}"
