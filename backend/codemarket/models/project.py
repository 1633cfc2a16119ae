# codemarket/models/project.py
"""
Database model for projects listed on the marketplace.
A project is a code archive plus metadata offered for sale by a seller.
"""
from decimal import Decimal
from tortoise import fields, models

class Project(models.Model):
    """
    Project database model.

    Invariants:
    - rating is the mean of the project's review ratings (2 decimal places)
      and review_count is the number of those reviews; both are rewritten
      together whenever a review is added
    - verified only ever goes from False to True
    - downloads counts purchases of the project
    """
    id = fields.IntField(pk=True)
    title = fields.CharField(max_length=256)
    description = fields.TextField()
    price = fields.DecimalField(max_digits=10, decimal_places=2)
    category = fields.CharField(max_length=64, index=True)  # e.g. web, mobile, ai, games, other
    technologies = fields.JSONField(default=list)  # List of technology tags
    seller = fields.ForeignKeyField(
        "models.User",
        related_name="projects",
        on_delete=fields.RESTRICT,
    )
    preview_image_url = fields.CharField(max_length=1024, null=True)  # Optional preview image/video
    code_file_url = fields.CharField(max_length=1024)  # Code archive under /uploads
    verified = fields.BooleanField(default=False)
    downloads = fields.IntField(default=0)
    rating = fields.DecimalField(max_digits=3, decimal_places=2, default=Decimal("0"))
    review_count = fields.IntField(default=0)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now_add=True)  # Bumped explicitly by Storage.update_project / verify_project

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "projects"
