"""Dependency injection for FastAPI endpoints"""

from datetime import tzinfo
from fastapi import Request
from smartspend_gateway.config import settings


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_local_timezone() -> tzinfo:
    """Timezone used to localize offset-carrying timestamps"""
    return settings.tz
