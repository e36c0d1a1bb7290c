"""Material domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import NotFoundError


class MaterialUnavailable(NotFoundError):
    """The material does not exist or is inactive."""

    default_code = "MATERIAL_NOT_FOUND"
