"""Client domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import NotFoundError


class ClientNotFound(NotFoundError):
    """The client does not exist or is inactive."""

    default_code = "CLIENT_NOT_FOUND"
