"""auth/ -- Authentication and session package for JobHunter.

Layer rule: auth/ imports only stdlib, third-party libraries and core/.
It does NOT import from api/ or company/.
api/ imports from auth/, not the other way around. The one exception is
auth/dependencies.py, which is FastAPI glue and may import fastapi.
"""
