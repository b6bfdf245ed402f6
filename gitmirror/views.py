from __future__ import annotations

import logging

from django.core.exceptions import ImproperlyConfigured
from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response

from tiddlers.authentication import API_AUTHENTICATION

from .engine import get_engine
from .exceptions import MirrorError

logger = logging.getLogger(__name__)


@api_view(["GET", "POST"])
@authentication_classes(API_AUTHENTICATION)
@permission_classes([IsAdminUser])
def mirror(request):
    """Run the git mirror once. Meant for a scheduler hitting the URL."""
    try:
        engine = get_engine()
    except ImproperlyConfigured as e:
        logger.error("mirror is not configured: %s", e)
        return Response({"status": "error", "detail": str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

    try:
        result = engine.run()
    except MirrorError as e:
        logger.error("mirror run failed: %s", e)
        return Response({"status": "error", "detail": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return Response(
        {"status": "ok", "committed": result.committed, "written": result.written, "changes": result.changes},
        status=status.HTTP_200_OK,
    )
