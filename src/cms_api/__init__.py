"""Content management API: users, roles and permission-based access control."""

__version__ = "0.1.0"
