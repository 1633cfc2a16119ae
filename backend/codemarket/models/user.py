# codemarket/models/user.py
"""
Database model for users.
Represents a marketplace account that can buy projects, sell projects, or both.
"""
from tortoise import fields, models

USER_ROLES = ("buyer", "seller", "both")

class User(models.Model):
    """
    User database model.

    Relationships:
    - Has many Projects as seller (related_name="projects")
    - Has many Purchases as buyer (related_name="purchases")
    - Has many Reviews, sent/received Messages and filed Reports

    Security:
    - Password is stored as an Argon2 hash, never in plain text
    - Username and email are unique across all users
    - Nested projections of a user expose id, username and full name only
    """
    id = fields.IntField(pk=True)  # Sequential, server-assigned
    username = fields.CharField(max_length=256, unique=True, index=True)
    email = fields.CharField(max_length=256, unique=True)
    password_hash = fields.CharField(max_length=255)
    full_name = fields.CharField(max_length=256)
    role = fields.CharField(max_length=16, default="buyer")  # buyer, seller, both
    payment_customer_id = fields.CharField(max_length=128, null=True)  # Customer reference at the payment provider
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"
