"""
Unit tests for core.storage against an in-memory database.
"""
from decimal import Decimal

import pytest
import pytest_asyncio
from tortoise.exceptions import IntegrityError

from codemarket.core.storage import DuplicatePurchaseError, Storage, mean_rating
from codemarket.models import Project


@pytest_asyncio.fixture
async def store(db):
    return Storage()


@pytest_asyncio.fixture
async def seller(create_user):
    return await create_user(role="seller")


@pytest_asyncio.fixture
async def new_project(store, seller):
    async def _new(title="Todo App", category="web", price="19.99", **extra):
        data = {
            "title": title,
            "description": f"{title} source code",
            "price": Decimal(price),
            "category": category,
            "technologies": ["Python"],
            "seller_id": seller.id,
            "code_file_url": f"/uploads/{title.lower().replace(' ', '-')}.zip",
        }
        data.update(extra)
        return await store.create_project(data)

    return _new


class TestMeanRating:
    @pytest.mark.parametrize(
        "ratings,expected",
        [
            ([], "0.00"),
            ([4, 5], "4.50"),
            ([5, 5, 4], "4.67"),
            ([1, 2], "1.50"),
            ([1, 1, 2], "1.33"),
            ([3], "3.00"),
        ],
    )
    def test_mean_rating(self, ratings, expected):
        assert str(mean_rating(ratings)) == expected


@pytest.mark.asyncio
async def test_create_project_ignores_derived_fields(new_project):
    project = await new_project(verified=True, downloads=50, rating=Decimal("5.00"), review_count=9)

    stored = await Project.get(id=project.id)
    assert stored.verified is False
    assert stored.downloads == 0
    assert stored.rating == 0
    assert stored.review_count == 0


@pytest.mark.asyncio
async def test_get_projects_filters_by_category_newest_first(store, new_project):
    p1 = await new_project("One", category="web")
    await new_project("Two", category="games")
    p3 = await new_project("Three", category="web")

    items = await store.get_projects(category="web")
    assert [p["id"] for p in items] == [p3.id, p1.id]
    assert items[0]["seller"]["username"]
    assert "codeFileUrl" not in items[0]

    assert await store.get_projects(category="desktop") == []


@pytest.mark.asyncio
async def test_get_projects_unknown_sort(store):
    with pytest.raises(ValueError):
        await store.get_projects(sort="alphabetical")


@pytest.mark.asyncio
async def test_get_project_with_seller(store, new_project, seller):
    project = await new_project()
    detail = await store.get_project_with_seller(project.id)
    assert detail["seller"] == {"id": seller.id, "username": seller.username, "fullName": seller.full_name}
    assert await store.get_project_with_seller(999) is None


@pytest.mark.asyncio
async def test_update_project_only_touches_editable_fields(store, new_project):
    project = await new_project()
    updated = await store.update_project(project.id, {"title": "Renamed", "downloads": 999, "verified": True})

    assert updated.title == "Renamed"
    assert updated.downloads == 0
    assert updated.verified is False


@pytest.mark.asyncio
async def test_verify_project_is_idempotent(store, new_project):
    project = await new_project()
    assert await store.verify_project(project.id) is True
    assert await store.verify_project(project.id) is False
    assert (await store.get_project(project.id)).verified is True


@pytest.mark.asyncio
async def test_create_purchase_counts_download_and_rejects_duplicate(store, new_project, create_user):
    project = await new_project()
    buyer = await create_user()
    data = {"buyer_id": buyer.id, "project_id": project.id, "amount": project.price, "payment_intent_id": "pi_1"}

    purchase = await store.create_purchase(data)
    assert purchase.amount == Decimal("19.99")
    assert (await store.get_project(project.id)).downloads == 1

    with pytest.raises(DuplicatePurchaseError) as excinfo:
        await store.create_purchase({**data, "payment_intent_id": "pi_2"})
    assert excinfo.value.project_id == project.id
    # The failed insert rolled back without counting a download
    assert (await store.get_project(project.id)).downloads == 1

    found = await store.get_purchase(buyer.id, project.id)
    assert found.id == purchase.id
    assert await store.get_purchase(buyer.id, 999) is None


@pytest.mark.asyncio
async def test_create_purchase_other_integrity_errors_are_not_duplicates(store, create_user):
    buyer = await create_user()
    data = {"buyer_id": buyer.id, "project_id": 424242, "amount": Decimal("5.00"), "payment_intent_id": "pi_x"}

    with pytest.raises(IntegrityError) as excinfo:
        await store.create_purchase(data)
    assert not isinstance(excinfo.value, DuplicatePurchaseError)
    assert await store.get_purchase(buyer.id, 424242) is None


@pytest.mark.asyncio
async def test_user_purchases_newest_first(store, new_project, create_user):
    buyer = await create_user()
    first = await new_project("First")
    second = await new_project("Second")
    for project in (first, second):
        await store.create_purchase({"buyer_id": buyer.id, "project_id": project.id, "amount": project.price})

    history = await store.get_user_purchases(buyer.id)
    assert [h["project"]["title"] for h in history] == ["Second", "First"]
    assert history[0]["amount"] == "19.99"


@pytest.mark.asyncio
async def test_create_review_recomputes_rating(store, new_project, create_user):
    project = await new_project()
    for rating in (4, 5):
        buyer = await create_user()
        await store.create_review({"project_id": project.id, "buyer_id": buyer.id, "rating": rating})

    stored = await store.get_project(project.id)
    assert stored.review_count == 2
    assert stored.rating == Decimal("4.5")
    assert len(await store.get_project_reviews(project.id)) == 2


@pytest.mark.asyncio
async def test_project_messages_oldest_first(store, new_project, seller, create_user):
    project = await new_project()
    buyer = await create_user()
    for sender, receiver, text in [(buyer, seller, "first"), (seller, buyer, "second"), (buyer, seller, "third")]:
        await store.create_message({
            "project_id": project.id,
            "sender_id": sender.id,
            "receiver_id": receiver.id,
            "content": text,
        })

    messages = await store.get_project_messages(project.id)
    assert [m["content"] for m in messages] == ["first", "second", "third"]


@pytest.mark.asyncio
async def test_reports_filtered_by_reporter(store, new_project, seller, create_user):
    project = await new_project()
    alice = await create_user()
    bob = await create_user()
    for reporter in (alice, bob):
        await store.create_report({
            "project_id": project.id,
            "reporter_id": reporter.id,
            "seller_id": seller.id,
            "reason": "spam",
        })

    assert len(await store.get_reports()) == 2
    mine = await store.get_reports(reporter_id=alice.id)
    assert len(mine) == 1
    assert mine[0]["status"] == "pending"
    assert mine[0]["reporter"]["id"] == alice.id


@pytest.mark.asyncio
async def test_seller_stats(store, new_project, seller):
    cheap = await new_project("Cheap", price="1.25")
    await new_project("Unsold", price="80.00")
    await Project.filter(id=cheap.id).update(downloads=4, rating=Decimal("5.00"))

    stats = await store.get_seller_stats(seller.id)
    assert stats == {
        "projectCount": 2,
        "totalDownloads": 4,
        "totalEarnings": "5.00",
        "averageRating": "2.5",
    }


@pytest.mark.asyncio
async def test_users_by_email_and_username(store):
    user = await store.create_user({
        "username": "carol",
        "email": "carol@example.com",
        "password_hash": "x",
        "full_name": "Carol",
    })
    assert user.role == "buyer"
    assert (await store.get_user_by_email("carol@example.com")).id == user.id
    assert (await store.get_user_by_username("carol")).id == user.id
    assert await store.get_user_by_username("nobody") is None

    updated = await store.update_payment_customer_id(user.id, "cus_123")
    assert updated.payment_customer_id == "cus_123"
