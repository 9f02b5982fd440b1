from align.presentation.middleware.correlation import CorrelationIDMiddleware
from align.presentation.middleware.routing import HostRoutingMiddleware, extract_subdomain
from align.presentation.middleware.security import (
    RequestSizeLimitMiddleware,
    SecurityHeadersMiddleware,
)

__all__ = [
    "CorrelationIDMiddleware",
    "HostRoutingMiddleware",
    "extract_subdomain",
    "RequestSizeLimitMiddleware",
    "SecurityHeadersMiddleware",
]
