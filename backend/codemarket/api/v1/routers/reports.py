# codemarket/api/v1/routers/reports.py
from fastapi import APIRouter, Depends, HTTPException, status
from codemarket.api.v1.deps import get_current_user, get_storage
from codemarket.core.serializers import report_out
from codemarket.core.storage import Storage
from codemarket.models.user import User
from codemarket.schemas.marketplace import ReportIn

router = APIRouter(prefix="/reports", tags=["reports"])

@router.post("", status_code=status.HTTP_201_CREATED)
async def file_report(body: ReportIn, user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
    """
    Report a project for abuse.

    Raises:
        HTTPException (404): If project does not exist
    """
    project = await storage.get_project(body.projectId)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    report = await storage.create_report({
        "project_id": project.id,
        "reporter_id": user.id,
        "seller_id": project.seller_id,
        "reason": body.reason,
        "description": body.description,
        "status": "pending",
    })
    return report_out(report)

@router.get("")
async def my_reports(user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
    """Reports filed by the caller, newest first."""
    return await storage.get_reports(reporter_id=user.id)
