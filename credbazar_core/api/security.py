"""
Security Headers
================
Hardening headers stamped on every collector response.
"""

from typing import Awaitable, Callable, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

# Sent on every response regardless of content type.
BASE_HEADERS: Dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Permitted-Cross-Domain-Policies": "none",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Origin-Agent-Cluster": "?1",
}

# Only meaningful for documents a browser renders (the banner, API docs).
HTML_CSP = "; ".join([
    "default-src 'self'",
    "base-uri 'self'",
    "font-src 'self' https: data:",
    "form-action 'self'",
    "frame-ancestors 'self'",
    "img-src 'self' data:",
    "object-src 'none'",
    "script-src 'self'",
    "style-src 'self' https: 'unsafe-inline'",
])


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Adds the header set a browser-facing form backend is expected to send.

    Covers content sniffing, framing, referrer leakage, cross-origin
    isolation and HSTS. The CSP is only attached to HTML responses; JSON
    bodies do not need it.
    """

    def __init__(
        self,
        app,
        hsts_max_age: Optional[int] = 15552000,  # 180 days, None disables
        frame_options: str = "SAMEORIGIN",
        referrer_policy: str = "no-referrer",
        html_csp: str = HTML_CSP,
    ):
        super().__init__(app)
        self.html_csp = html_csp
        self.headers = dict(BASE_HEADERS)
        self.headers["X-Frame-Options"] = frame_options
        self.headers["Referrer-Policy"] = referrer_policy
        if hsts_max_age:
            self.headers["Strict-Transport-Security"] = (
                f"max-age={hsts_max_age}; includeSubDomains"
            )

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        response = await call_next(request)
        response.headers.update(self.headers)
        if response.headers.get("content-type", "").startswith("text/html"):
            response.headers["Content-Security-Policy"] = self.html_csp
        return response
