# codemarket/api/v1/routers/dashboard.py
from fastapi import APIRouter, Depends
from codemarket.api.v1.deps import get_current_user, get_storage
from codemarket.core.storage import Storage
from codemarket.models.user import User

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

@router.get("/seller")
async def seller_dashboard(user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
    """
    The caller's listed projects plus totals over them.

    Returns:
        dict: {"projects": [...], "stats": {projectCount, totalDownloads,
               totalEarnings, averageRating}}
    """
    projects = await storage.get_projects(seller_id=user.id)
    stats = await storage.get_seller_stats(user.id)
    return {"projects": projects, "stats": stats}

@router.get("/buyer")
async def buyer_dashboard(user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
    """The caller's purchase history, newest first."""
    return {"purchases": await storage.get_user_purchases(user.id)}
