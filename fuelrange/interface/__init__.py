"""Mini README: HTTP interface for fuelrange.

Exports the FastAPI application factory used by ``main_range_centre.py``.
"""

from .web_app import create_application

__all__ = ["create_application"]
