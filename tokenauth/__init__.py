"""
tokenauth - email/password authentication with rotating refresh tokens.
"""

__version__ = "1.0.0"
