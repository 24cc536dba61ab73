"""Helpers shared by request schemas."""
from typing import Any, Dict

from pydantic import BaseModel


def present_fields(model: BaseModel, *, drop_blank: bool = True) -> Dict[str, Any]:
    """
    Return only the fields the caller actually supplied.

    A field is present when it was set in the request and, with
    ``drop_blank``, is neither None nor an empty string. Absent fields are
    left out so that column defaults (or the stored value, for updates)
    stay in effect.
    """
    values = model.model_dump(exclude_unset=True)
    if drop_blank:
        values = {k: v for k, v in values.items() if v is not None and v != ""}
    return values
