"""Petition admin users: credentials, password policy, roles and lockout."""

__version__ = "0.1.0"
