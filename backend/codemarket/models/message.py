# codemarket/models/message.py
from tortoise import fields, models

class Message(models.Model):
    """
    Buyer/seller message about a project.
    Displayed oldest first.
    """
    id = fields.IntField(pk=True)
    project = fields.ForeignKeyField("models.Project", related_name="messages", on_delete=fields.CASCADE)
    sender = fields.ForeignKeyField("models.User", related_name="sent_messages", on_delete=fields.CASCADE)
    receiver = fields.ForeignKeyField("models.User", related_name="received_messages", on_delete=fields.CASCADE)
    content = fields.TextField()
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "messages"
