"""
Pydantic schema definitions for API payloads.

Each domain (auth, users, calendars, events) defines its own Pydantic
models for request and response bodies.  Schemas are separated from
the SQLite rows to decouple API representation from persistence.
JSON keys are camelCase (``startTime``); snake_case is accepted on
input as well.
"""
