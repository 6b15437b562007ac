"""
Application package initializer.

The application is split by concern: ``core`` holds configuration,
storage, security and error handling, ``schemas`` the request and
response models, ``services`` the business logic per domain (users,
sessions, calendars, events) and ``api/v1/endpoints`` one router per
route group.  Versioning is handled by grouping routers under the
``api/<version>/`` hierarchy.
"""

from .main import app  # noqa: F401
