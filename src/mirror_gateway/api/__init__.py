"""
API Module
==========

HTTP surface of the gateway.

Components:
    - create_app: FastAPI application factory
    - router: Fixed route table under the versioned prefix
"""

from mirror_gateway.api.app import create_app, error_response
from mirror_gateway.api.routes import FormFields, router


__all__ = [
    "create_app",
    "error_response",
    "FormFields",
    "router",
]
