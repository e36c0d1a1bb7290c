"""Success envelope shared by every API view."""

from __future__ import annotations

from typing import Any, Optional

from django.utils import timezone
from rest_framework import status as http_status
from rest_framework.response import Response


def success_response(
    data: Any = None,
    message: str = "OK",
    status: int = http_status.HTTP_200_OK,
    meta: Optional[dict] = None,
) -> Response:
    """Wrap ``data`` as ``{success, message, data, timestamp}``."""
    body = {
        "success": True,
        "message": message,
        "data": data,
        "timestamp": timezone.now().isoformat(),
    }
    if meta:
        body["meta"] = meta
    return Response(body, status=status)
