# codemarket/core/storage.py
"""
Data access layer.

`Storage` is the single place route handlers touch the database. One
instance is built with the application and injected into handlers, so
tests and alternative backends can substitute their own.

Conventions:
- Lookups return None (or an empty list) when nothing matches; they never
  raise for "not found".
- Single-row operations return ORM instances; joined reads return JSON-ready
  dict projections with the related user nested as {id, username, fullName}.
- Writes that also touch a derived aggregate (download counter, rating)
  run in one transaction.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional

from tortoise import timezone
from tortoise.exceptions import IntegrityError
from tortoise.expressions import F, Q
from tortoise.transactions import in_transaction

from codemarket.core import serializers
from codemarket.models import User, Project, Purchase, Review, Message, Report

logger = logging.getLogger("uvicorn.error")

# Client-facing sort keys for project listings; "newest" is the database order
PROJECT_SORTS = {
    "newest": None,
    "price-low": (lambda p: Decimal(p["price"]), False),
    "price-high": (lambda p: Decimal(p["price"]), True),
    "popular": (lambda p: p["downloads"], True),
    "rating": (lambda p: Decimal(p["rating"]), True),
}

# Columns a seller may change after listing a project
EDITABLE_PROJECT_FIELDS = {"title", "description", "price", "category", "technologies", "preview_image_url"}


class DuplicatePurchaseError(Exception):
    """The buyer already owns a purchase of this project."""

    def __init__(self, buyer_id: int, project_id: int):
        super().__init__(f"Purchase of project {project_id} by user {buyer_id} already exists")
        self.buyer_id = buyer_id
        self.project_id = project_id


def mean_rating(ratings: list[int]) -> Decimal:
    """Arithmetic mean rounded half-up to two decimal places (0 when empty)."""
    if not ratings:
        return Decimal("0.00")
    avg = Decimal(sum(ratings)) / Decimal(len(ratings))
    return avg.quantize(serializers.CENT, rounding=ROUND_HALF_UP)


class Storage:
    """Typed CRUD operations per entity on top of Tortoise ORM."""

    def __init__(self, connection_name: str = "default"):
        self.connection_name = connection_name

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------
    async def get_user(self, user_id: int) -> Optional[User]:
        return await User.get_or_none(id=user_id)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        return await User.get_or_none(email=email)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        return await User.get_or_none(username=username)

    async def create_user(self, data: dict[str, Any]) -> User:
        """
        Insert a user. `data` carries username, email, password_hash,
        full_name, role and optionally payment_customer_id.
        """
        return await User.create(**data)

    async def update_payment_customer_id(self, user_id: int, customer_id: str) -> Optional[User]:
        await User.filter(id=user_id).update(payment_customer_id=customer_id)
        return await User.get_or_none(id=user_id)

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------
    async def get_project(self, project_id: int) -> Optional[Project]:
        return await Project.get_or_none(id=project_id)

    async def get_project_with_seller(self, project_id: int) -> Optional[dict]:
        p = await Project.filter(id=project_id).select_related("seller").first()
        if not p:
            return None
        return serializers.project_listing(p)

    async def get_projects(
        self,
        category: str | None = None,
        seller_id: int | None = None,
        search: str | None = None,
        sort: str = "newest",
    ) -> list[dict]:
        """
        List projects with their seller, newest first.

        Filters are combined with AND. `search` matches a case-insensitive
        substring of title or description. `sort` re-orders the full result
        set (see PROJECT_SORTS); ties keep newest-first order.
        """
        if sort not in PROJECT_SORTS:
            raise ValueError(f"Unknown sort: {sort}")
        query = Project.all()
        if category:
            query = query.filter(category=category)
        if seller_id:
            query = query.filter(seller_id=seller_id)
        if search:
            query = query.filter(Q(title__icontains=search) | Q(description__icontains=search))
        rows = await query.select_related("seller").order_by("-created_at", "-id")
        items = [serializers.project_listing(p) for p in rows]

        order = PROJECT_SORTS[sort]
        if order:
            key, reverse = order
            items.sort(key=key, reverse=reverse)
        return items

    async def create_project(self, data: dict[str, Any]) -> Project:
        """
        Insert a project. Verification state, counters and rating always
        start at their defaults regardless of what `data` contains.
        """
        fields = {k: v for k, v in data.items() if k not in ("verified", "downloads", "rating", "review_count")}
        return await Project.create(**fields)

    async def update_project(self, project_id: int, updates: dict[str, Any]) -> Optional[Project]:
        changes = {k: v for k, v in updates.items() if k in EDITABLE_PROJECT_FIELDS}
        changes["updated_at"] = timezone.now()
        await Project.filter(id=project_id).update(**changes)
        return await Project.get_or_none(id=project_id)

    async def verify_project(self, project_id: int) -> bool:
        """
        Mark a project as verified.

        Only an unverified project is touched, so calling this again is a
        no-op. Returns True if this call flipped the flag.
        """
        flipped = await Project.filter(id=project_id, verified=False).update(
            verified=True, updated_at=timezone.now()
        )
        return bool(flipped)

    # ------------------------------------------------------------------
    # Purchases
    # ------------------------------------------------------------------
    async def create_purchase(self, data: dict[str, Any]) -> Purchase:
        """
        Record a purchase and count it as a download of the project.

        Raises:
            DuplicatePurchaseError: the buyer already purchased the project
        """
        buyer_id, project_id = data["buyer_id"], data["project_id"]
        try:
            async with in_transaction(self.connection_name) as conn:
                purchase = await Purchase.create(**data, using_db=conn)
                await Project.filter(id=project_id).using_db(conn).update(downloads=F("downloads") + 1)
        except IntegrityError as exc:
            # Only the (buyer, project) constraint means "already purchased"
            if await self.get_purchase(buyer_id, project_id) is None:
                raise
            logger.warning("[purchase] rejected duplicate buyer=%s project=%s", buyer_id, project_id)
            raise DuplicatePurchaseError(buyer_id, project_id) from exc
        return purchase

    async def get_purchase(self, buyer_id: int, project_id: int) -> Optional[Purchase]:
        return await Purchase.filter(buyer_id=buyer_id, project_id=project_id).order_by("id").first()

    async def get_user_purchases(self, user_id: int) -> list[dict]:
        rows = await Purchase.filter(buyer_id=user_id).select_related("project").order_by("-created_at", "-id")
        return [serializers.purchase_history_item(pu) for pu in rows]

    # ------------------------------------------------------------------
    # Reviews
    # ------------------------------------------------------------------
    async def create_review(self, data: dict[str, Any]) -> Review:
        """
        Insert a review and recompute the project's rating and review count
        from all of its reviews, including the new one.

        The project row is locked first so concurrent reviews of the same
        project recompute one after another and each sees the other's row.
        """
        project_id = data["project_id"]
        async with in_transaction(self.connection_name) as conn:
            await Project.filter(id=project_id).using_db(conn).select_for_update().first()
            review = await Review.create(**data, using_db=conn)
            ratings = await Review.filter(project_id=project_id).using_db(conn).values_list("rating", flat=True)
            await Project.filter(id=project_id).using_db(conn).update(
                rating=mean_rating(list(ratings)),
                review_count=len(ratings),
            )
        return review

    async def get_project_reviews(self, project_id: int) -> list[dict]:
        rows = await Review.filter(project_id=project_id).select_related("buyer").order_by("-created_at", "-id")
        return [serializers.review_listing(r) for r in rows]

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------
    async def create_message(self, data: dict[str, Any]) -> Message:
        return await Message.create(**data)

    async def get_project_messages(self, project_id: int) -> list[dict]:
        """Messages about a project, oldest first."""
        rows = await Message.filter(project_id=project_id).select_related("sender").order_by("created_at", "id")
        return [serializers.message_listing(m) for m in rows]

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------
    async def create_report(self, data: dict[str, Any]) -> Report:
        return await Report.create(**data)

    async def get_reports(self, reporter_id: int | None = None) -> list[dict]:
        query = Report.all()
        if reporter_id:
            query = query.filter(reporter_id=reporter_id)
        rows = await query.select_related("project", "reporter").order_by("-created_at", "-id")
        return [serializers.report_listing(r) for r in rows]

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------
    async def get_seller_stats(self, seller_id: int) -> dict:
        """
        Totals over a seller's projects: count, downloads, earnings
        (price x downloads) and the average of the project ratings.
        """
        rows = await Project.filter(seller_id=seller_id).values("price", "downloads", "rating")
        earnings = sum((Decimal(r["price"]) * r["downloads"] for r in rows), Decimal("0"))
        downloads = sum(r["downloads"] for r in rows)
        if rows:
            avg = sum((Decimal(r["rating"]) for r in rows), Decimal("0")) / len(rows)
        else:
            avg = Decimal("0")
        return {
            "projectCount": len(rows),
            "totalDownloads": downloads,
            "totalEarnings": serializers.money(earnings),
            "averageRating": str(avg.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)),
        }
