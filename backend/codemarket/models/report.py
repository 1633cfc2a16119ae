# codemarket/models/report.py
from tortoise import fields, models

REPORT_STATUSES = ("pending", "resolved", "dismissed")

class Report(models.Model):
    """
    Abuse report filed against a project.
    - seller: copied from the project when the report is filed
    - status: pending / resolved / dismissed
    """
    id = fields.IntField(pk=True)
    project = fields.ForeignKeyField("models.Project", related_name="reports", on_delete=fields.CASCADE)
    reporter = fields.ForeignKeyField("models.User", related_name="filed_reports", on_delete=fields.CASCADE)
    seller = fields.ForeignKeyField("models.User", related_name="received_reports", on_delete=fields.CASCADE)
    reason = fields.CharField(max_length=256)
    description = fields.TextField(null=True)
    status = fields.CharField(max_length=16, default="pending")
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "reports"
