"""Admin-token authentication for retainer endpoints.

Admins hold a per-client capability token instead of a user account. The token
is read from ``Authorization: Bearer <token>`` and exposed as ``request.auth``;
resolving it to a client is the service layer's job.
"""

from __future__ import annotations

from django.contrib.auth.models import AnonymousUser
from rest_framework.authentication import BaseAuthentication
from rest_framework.authentication import get_authorization_header

KEYWORD = "Bearer"


class AdminTokenAuthentication(BaseAuthentication):
    def authenticate(self, request):
        parts = get_authorization_header(request).split()
        if len(parts) != 2 or parts[0].decode(errors="ignore") != KEYWORD:  # noqa: PLR2004
            return None
        token = parts[1].decode(errors="ignore").strip()
        if not token:
            return None
        return (AnonymousUser(), token)

    def authenticate_header(self, request):
        return KEYWORD
