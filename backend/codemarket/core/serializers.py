# codemarket/core/serializers.py
"""
Conversion of ORM rows into the JSON shapes returned by the API.

Field names are camelCase to match the frontend contract. Decimal amounts
are rendered as strings with two decimal places. Nested user projections
never include email or password data.
"""
from decimal import Decimal, ROUND_HALF_UP

from codemarket.models import User, Project, Purchase, Review, Message, Report

CENT = Decimal("0.01")


def money(value) -> str:
    """Render a decimal amount as a string with exactly two decimal places."""
    return str(Decimal(value if value is not None else 0).quantize(CENT, rounding=ROUND_HALF_UP))


def _iso(ts):
    return ts.isoformat() if ts else None


def user_ref(u: User | None) -> dict | None:
    """Minimal nested user projection: id, username, full name."""
    if u is None:
        return None
    return {"id": u.id, "username": u.username, "fullName": u.full_name}


def user_out(u: User) -> dict:
    """The account as seen by its owner."""
    return {
        "id": u.id,
        "username": u.username,
        "email": u.email,
        "fullName": u.full_name,
        "role": u.role,
        "createdAt": _iso(u.created_at),
    }


def project_out(p: Project) -> dict:
    """Complete stored project row (returned to its seller)."""
    return {
        "id": p.id,
        "title": p.title,
        "description": p.description,
        "price": money(p.price),
        "category": p.category,
        "technologies": list(p.technologies or []),
        "sellerId": p.seller_id,
        "previewImageUrl": p.preview_image_url,
        "codeFileUrl": p.code_file_url,
        "verified": p.verified,
        "downloads": p.downloads,
        "rating": money(p.rating),
        "reviewCount": p.review_count,
        "createdAt": _iso(p.created_at),
        "updatedAt": _iso(p.updated_at),
    }


def project_listing(p: Project) -> dict:
    """
    Public project projection with the seller nested.
    The code archive URL is left out; buyers get it when they purchase.
    """
    return {
        "id": p.id,
        "title": p.title,
        "description": p.description,
        "price": money(p.price),
        "category": p.category,
        "technologies": list(p.technologies or []),
        "previewImageUrl": p.preview_image_url,
        "verified": p.verified,
        "downloads": p.downloads,
        "rating": money(p.rating),
        "reviewCount": p.review_count,
        "createdAt": _iso(p.created_at),
        "seller": user_ref(p.seller),
    }


def purchase_out(pu: Purchase) -> dict:
    return {
        "id": pu.id,
        "buyerId": pu.buyer_id,
        "projectId": pu.project_id,
        "amount": money(pu.amount),
        "paymentIntentId": pu.payment_intent_id,
        "createdAt": _iso(pu.created_at),
    }


def purchase_history_item(pu: Purchase) -> dict:
    """Purchase with the purchased project nested, download URL included."""
    p = pu.project
    return {
        "id": pu.id,
        "amount": money(pu.amount),
        "createdAt": _iso(pu.created_at),
        "project": {
            "id": p.id,
            "title": p.title,
            "description": p.description,
            "previewImageUrl": p.preview_image_url,
            "codeFileUrl": p.code_file_url,
        },
    }


def review_out(r: Review) -> dict:
    return {
        "id": r.id,
        "projectId": r.project_id,
        "buyerId": r.buyer_id,
        "rating": r.rating,
        "comment": r.comment,
        "createdAt": _iso(r.created_at),
    }


def review_listing(r: Review) -> dict:
    return {
        "id": r.id,
        "rating": r.rating,
        "comment": r.comment,
        "createdAt": _iso(r.created_at),
        "buyer": user_ref(r.buyer),
    }


def message_out(m: Message) -> dict:
    return {
        "id": m.id,
        "projectId": m.project_id,
        "senderId": m.sender_id,
        "receiverId": m.receiver_id,
        "content": m.content,
        "createdAt": _iso(m.created_at),
    }


def message_listing(m: Message) -> dict:
    return {
        "id": m.id,
        "content": m.content,
        "createdAt": _iso(m.created_at),
        "sender": user_ref(m.sender),
    }


def report_out(r: Report) -> dict:
    return {
        "id": r.id,
        "projectId": r.project_id,
        "reporterId": r.reporter_id,
        "sellerId": r.seller_id,
        "reason": r.reason,
        "description": r.description,
        "status": r.status,
        "createdAt": _iso(r.created_at),
    }


def report_listing(r: Report) -> dict:
    return {
        "id": r.id,
        "reason": r.reason,
        "description": r.description,
        "status": r.status,
        "createdAt": _iso(r.created_at),
        "project": {"id": r.project.id, "title": r.project.title},
        "reporter": user_ref(r.reporter),
    }
