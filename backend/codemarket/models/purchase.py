# codemarket/models/purchase.py
from tortoise import fields, models

class Purchase(models.Model):
    """
    A buyer's right to download a project's code archive.
    - amount: price charged, normally the project price at purchase time
    - payment_intent_id: payment provider transaction reference
    - one row per (buyer, project); the store rejects duplicates
    """
    id = fields.IntField(pk=True)
    buyer = fields.ForeignKeyField("models.User", related_name="purchases", on_delete=fields.RESTRICT)
    project = fields.ForeignKeyField("models.Project", related_name="purchases", on_delete=fields.RESTRICT)
    amount = fields.DecimalField(max_digits=10, decimal_places=2)
    payment_intent_id = fields.CharField(max_length=255, null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "purchases"
        unique_together = (("buyer", "project"),)
