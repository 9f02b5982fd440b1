"""
Host-based routing gate.

Requests to the app subdomain (app.<domain>, app.localhost) are served from
the /app surface: "/dashboard" on app.example.com is handled as
"/app/dashboard". On the app surface, anonymous visitors are sent to the
entry path and signed-in visitors hitting the entry path go on to the
dashboard.
"""

import logging
import re
from collections.abc import Callable

from fastapi import Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import RedirectResponse

from align.infrastructure.security.jwt import extract_token, resolve_subject_id

logger = logging.getLogger(__name__)

# Never rewritten: API routes, health probe and static assets
_PASSTHROUGH = re.compile(
    r"^/(api|health|static|favicon\.ico)(/|$)|\.(svg|png|jpe?g|gif|webp|ico|css|js)$",
    re.IGNORECASE,
)


def extract_subdomain(host: str) -> str:
    """
    Leading label of the Host header when it names a subdomain.

    app.localhost:3000 -> "app", localhost:3000 -> "", app.align.co -> "app",
    align.co -> "".
    """
    hostname = host.split(":", 1)[0].strip().lower()
    parts = hostname.split(".")
    if "localhost" in hostname:
        if len(parts) > 1 and parts[0] != "localhost":
            return parts[0]
        return ""
    if len(parts) >= 3:
        return parts[0]
    return ""


class HostRoutingMiddleware(BaseHTTPMiddleware):
    """Subdomain rewrite plus "authenticated or redirect" on the app surface"""

    def __init__(
        self,
        app,
        *,
        subdomain: str = "app",
        prefix: str = "/app",
        entry_path: str = "/app",
        dashboard_path: str = "/app/dashboard",
        public_paths: frozenset[str] = frozenset({"/app"}),
    ) -> None:
        super().__init__(app)
        self.subdomain = subdomain
        self.prefix = prefix.rstrip("/")
        self.entry_path = entry_path.rstrip("/") or "/"
        self.dashboard_path = dashboard_path.rstrip("/") or "/"
        self.public_paths = public_paths

    def _on_app_surface(self, path: str) -> bool:
        return path == self.prefix or path.startswith(self.prefix + "/")

    def _client_path(self, internal_path: str, rewritten: bool) -> str:
        """Translate an internal /app path back to what the client should request"""
        if rewritten and self._on_app_surface(internal_path):
            return internal_path[len(self.prefix):] or "/"
        return internal_path

    @staticmethod
    def _is_authenticated(request: Request) -> bool:
        token = extract_token(request)
        if not token:
            return False
        try:
            resolve_subject_id(token)
        except ValueError:
            return False
        return True

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        rewritten = False

        if (
            extract_subdomain(request.headers.get("host", "")) == self.subdomain
            and not _PASSTHROUGH.search(path)
        ):
            path = self.prefix + (path if path != "/" else "")
            request.scope["path"] = path
            request.scope["raw_path"] = path.encode()
            rewritten = True

        if self._on_app_surface(path):
            normalized = path.rstrip("/") or "/"
            authenticated = self._is_authenticated(request)
            if not authenticated and normalized not in self.public_paths:
                logger.info("Anonymous request to %s redirected to entry", normalized)
                return RedirectResponse(
                    self._client_path(self.entry_path, rewritten), status_code=307
                )
            if authenticated and normalized == self.entry_path:
                return RedirectResponse(
                    self._client_path(self.dashboard_path, rewritten), status_code=307
                )

        return await call_next(request)
