"""
Top-level package for the Calendar API.

All functionality lives in submodules under ``app``; import the ASGI
application as ``calendar_api.app.main:app``.
"""

__all__ = []
