from __future__ import annotations

from django.conf import settings
from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response

from . import store
from .authentication import API_AUTHENTICATION
from .exceptions import BadTiddler, TiddlerNotFound
from .fields import load_meta
from .listing import list_all


def _if_match_revision(request):
    """Revision named by an If-Match ETag, or None when the header is absent."""
    value = request.headers.get("If-Match", "").strip()
    if not value or value == "*":
        return None
    # "bag/<title>/<revision>:<md5>"
    tail = value.strip('"').rsplit("/", 1)[-1]
    try:
        return int(tail.split(":", 1)[0])
    except ValueError:
        raise BadTiddler(f"malformed If-Match header: {value}")


def _check_name(name, expected: str) -> None:
    if name is not None and name != expected:
        raise NotFound(f"unknown recipe or bag {name!r}")


def _get(title: str):
    t = store.get(title)
    if t.is_tombstone:
        raise TiddlerNotFound(f"tiddler {title!r} was deleted")
    try:
        data = load_meta(t.meta)
    except ValueError:
        raise TiddlerNotFound(f"tiddler {title!r} has unreadable metadata")
    data["text"] = t.text
    return Response(data)


def _put(request, title: str):
    revision, fingerprint = store.put(title, request.body, expected_revision=_if_match_revision(request))
    return Response(status=status.HTTP_204_NO_CONTENT, headers={"Etag": store.etag(title, revision, fingerprint)})


def _delete(request, title: str):
    store.delete(title, expected_revision=_if_match_revision(request))
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(["GET"])
@authentication_classes(API_AUTHENTICATION)
@permission_classes([IsAdminUser])
def tiddler_list(request, recipe: str | None = None):
    _check_name(recipe, settings.TIDDLY_RECIPE)
    return Response(list(list_all()))


@api_view(["GET", "PUT", "DELETE"])
@authentication_classes(API_AUTHENTICATION)
@permission_classes([IsAdminUser])
def tiddler(request, title: str):
    if request.method == "PUT":
        return _put(request, title)
    if request.method == "DELETE":
        return _delete(request, title)
    return _get(title)


@api_view(["GET", "PUT"])
@authentication_classes(API_AUTHENTICATION)
@permission_classes([IsAdminUser])
def recipe_tiddler(request, recipe: str, title: str):
    _check_name(recipe, settings.TIDDLY_RECIPE)
    if request.method == "PUT":
        return _put(request, title)
    return _get(title)


@api_view(["DELETE"])
@authentication_classes(API_AUTHENTICATION)
@permission_classes([IsAdminUser])
def bag_tiddler(request, bag: str, title: str):
    _check_name(bag, settings.TIDDLY_BAG)
    return _delete(request, title)


@api_view(["GET"])
@authentication_classes(API_AUTHENTICATION)
@permission_classes([IsAdminUser])
def server_status(request):
    name = request.user.get_username() if request.user.is_authenticated else "GUEST"
    return Response({"username": name, "space": {"recipe": settings.TIDDLY_RECIPE}})
