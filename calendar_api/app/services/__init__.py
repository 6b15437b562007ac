"""
Service layer.

Each service encapsulates the business logic and SQL of one domain so
that API handlers only translate between HTTP and service calls.
"""
