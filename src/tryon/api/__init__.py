"""
HTTP boundary for tryon (FastAPI).

Use create_app() to build the application, e.g. for uvicorn:
    uvicorn --factory tryon.api:create_app
"""

from tryon.api.app import create_app

__all__ = ["create_app"]
