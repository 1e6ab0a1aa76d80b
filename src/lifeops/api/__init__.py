"""
REST API layer for lifeops.

A FastAPI application factory whose routers delegate to ``lifeops.ops``.
Routers only translate HTTP parameters and map ``OperationResult`` onto
JSON envelopes or RFC 7807 problem responses.

Quick start::

    from lifeops.api import create_app

    app = create_app()  # ready for uvicorn
"""

from lifeops.api.app import create_app

__all__ = ["create_app"]
