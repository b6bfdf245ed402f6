from __future__ import annotations

from rest_framework.authentication import SessionAuthentication, TokenAuthentication


class TiddlyWebSessionAuthentication(SessionAuthentication):
    """Session auth that accepts the TiddlyWeb adaptor's custom header in place of a CSRF token.

    Browsers cannot attach ``X-Requested-With`` to a cross-site request without
    a CORS preflight, which this server never grants.
    """

    def enforce_csrf(self, request):
        if request.headers.get("X-Requested-With") == "TiddlyWiki":
            return
        super().enforce_csrf(request)


API_AUTHENTICATION = [TiddlyWebSessionAuthentication, TokenAuthentication]
