"""
Hospital management system: API server and portal client.
"""
__version__ = "1.0.0"
