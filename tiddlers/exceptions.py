from __future__ import annotations

from rest_framework import status
from rest_framework.exceptions import APIException, NotFound, ParseError


class TiddlerNotFound(NotFound):
    default_detail = "tiddler not found"
    default_code = "tiddler_not_found"


class BadTiddler(ParseError):
    default_detail = "malformed tiddler payload"
    default_code = "bad_tiddler"


class RevisionConflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "tiddler was modified concurrently, reload and retry"
    default_code = "revision_conflict"


class StalePrecondition(APIException):
    status_code = status.HTTP_412_PRECONDITION_FAILED
    default_detail = "tiddler revision does not match If-Match"
    default_code = "stale_revision"


class StoreError(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "tiddler store unavailable"
    default_code = "store_error"
