# codemarket/models/review.py
from tortoise import fields, models

class Review(models.Model):
    id = fields.IntField(pk=True)
    project = fields.ForeignKeyField("models.Project", related_name="reviews", on_delete=fields.CASCADE)
    buyer = fields.ForeignKeyField("models.User", related_name="reviews", on_delete=fields.CASCADE)
    rating = fields.IntField()  # 1-5, checked at the API boundary
    comment = fields.TextField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "reviews"
