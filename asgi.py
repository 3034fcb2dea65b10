"""
asgi.py -- ASGI entry point for JobHunter.

Process managers and `python main.py serve` point here. The application is
assembled in api/main.py; this module only re-exports it under a stable name.

Run with:  uvicorn asgi:app --reload
"""

from api.main import app

__all__ = ["app"]
