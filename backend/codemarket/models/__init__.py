# codemarket/models/__init__.py
"""
Database models module initialization.
Exports all Tortoise ORM models for convenient imports throughout the application.

Models exported:
- User: Marketplace account (buyer, seller or both)
- Project: Code project listed for sale
- Purchase: Buyer's download right for a project
- Review: Buyer rating of a purchased project
- Message: Buyer/seller message about a project
- Report: Abuse report against a project
"""
from .user import User
from .project import Project
from .purchase import Purchase
from .review import Review
from .message import Message
from .report import Report
