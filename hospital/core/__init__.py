"""
Shared infrastructure: security, audit trail, middleware, pagination, bootstrap.
"""
