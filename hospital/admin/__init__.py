"""
Administrator user management.
"""
