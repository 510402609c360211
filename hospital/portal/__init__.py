"""
Portal client for the hospital management system.

This module provides the client side of authentication:
- Session persistence over a pluggable key/value storage
- Session lifecycle (restore, login, logout) as an explicit tagged state
- Role-based route guarding and the role to landing-route table
- HTTP client for the authentication endpoints
"""
