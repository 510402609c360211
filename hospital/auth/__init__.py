"""
Authentication module for the hospital management system.

This module provides authentication and authorization functionality including:
- Patient self-registration with atomic profile creation
- Login with JWT token issuance
- Bearer token verification and role checks for protected endpoints
"""
