# codemarket/api/v1/routers/reviews.py
from fastapi import APIRouter, Depends, HTTPException, status
from codemarket.api.v1.deps import get_current_user, get_storage
from codemarket.core.serializers import review_out
from codemarket.core.storage import Storage
from codemarket.models.user import User
from codemarket.schemas.marketplace import ReviewIn

router = APIRouter(prefix="/reviews", tags=["reviews"])

@router.post("", status_code=status.HTTP_201_CREATED)
async def create_review(body: ReviewIn, user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
    """
    Review a purchased project.

    Adding the review recomputes the project's rating and review count.

    Raises:
        HTTPException (403): Caller has not purchased the project
    """
    if not await storage.get_purchase(user.id, body.projectId):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You must purchase the project to review it")
    review = await storage.create_review({
        "project_id": body.projectId,
        "buyer_id": user.id,
        "rating": body.rating,
        "comment": body.comment,
    })
    return review_out(review)

@router.get("/{project_id}")
async def list_reviews(project_id: int, storage: Storage = Depends(get_storage)):
    """Reviews of a project, newest first, with the reviewer nested."""
    return await storage.get_project_reviews(project_id)
