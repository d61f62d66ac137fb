"""
HTTP middleware.
"""

from sessionvault.api.middleware.origin_check import OriginCheckMiddleware
from sessionvault.api.middleware.request_id import REQUEST_ID_HEADER, RequestIdMiddleware
from sessionvault.api.middleware.security_headers import SecurityHeadersMiddleware

__all__ = [
    "REQUEST_ID_HEADER",
    "OriginCheckMiddleware",
    "RequestIdMiddleware",
    "SecurityHeadersMiddleware",
]
