"""
docrest HTTP API.

Thin FastAPI transport over :mod:`docrest.ops`: routers translate HTTP
requests into typed request objects, call one operation and render its
:class:`~docrest.ops.result.OperationResult`.

Usage::

    uvicorn docrest.api:create_app --factory
"""

from docrest.api.app import create_app

__all__ = ["create_app"]
