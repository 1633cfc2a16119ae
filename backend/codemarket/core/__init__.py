# codemarket/core/__init__.py
"""
Core application modules.
Contains essential infrastructure components:
- db: Database configuration and connection management
- security: Password hashing and access tokens
- storage: Data access layer shared by all route handlers
"""
