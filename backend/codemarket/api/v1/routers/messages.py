# codemarket/api/v1/routers/messages.py
from fastapi import APIRouter, Depends, HTTPException, status
from codemarket.api.v1.deps import get_current_user, get_storage
from codemarket.core.serializers import message_out
from codemarket.core.storage import Storage
from codemarket.models.user import User
from codemarket.schemas.marketplace import MessageIn

router = APIRouter(prefix="/messages", tags=["messages"])

@router.post("", status_code=status.HTTP_201_CREATED)
async def send_message(body: MessageIn, user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
    """
    Send a message about a project to another user.

    Raises:
        HTTPException (404): Project or receiver does not exist
    """
    if not await storage.get_project(body.projectId):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    if not await storage.get_user(body.receiverId):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Receiver not found")
    message = await storage.create_message({
        "project_id": body.projectId,
        "sender_id": user.id,
        "receiver_id": body.receiverId,
        "content": body.content,
    })
    return message_out(message)

@router.get("/{project_id}")
async def list_messages(project_id: int, user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
    """Messages about a project, oldest first."""
    return await storage.get_project_messages(project_id)
