"""Transaction Routes - ownership scoping, filters, paging and activity entries.

Invariants:
    - Members only see their own transactions; admins see everything
    - Another user's transaction is a 404 for a member (not a 403)
    - Each write leaves one activity entry
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy import select

from alphacore.models.activity_log import ActivityLog
from alphacore.models.category import Category
from alphacore.models.transaction import Transaction


@pytest.fixture
async def sales(test_db):
    c = Category(name="Satış", type="INCOME", color="#22c55e")
    test_db.add(c)
    await test_db.commit()
    return c


@pytest.fixture
async def other_tx(test_db, other_member, sales):
    t = Transaction(
        type="INCOME", amount=750, description="Başkasının geliri",
        date=datetime(2024, 1, 10, tzinfo=timezone.utc),
        category_id=sales.id, user_id=other_member.id,
    )
    test_db.add(t)
    await test_db.commit()
    return t


def _payload(category_id, **overrides):
    body = {
        "type": "INCOME", "amount": 1500.0, "description": "Web projesi",
        "date": "2024-01-15T10:00:00+03:00", "category_id": str(category_id),
    }
    body.update(overrides)
    return body


async def test_create_transaction(client, member, member_headers, sales, test_db):
    res = await client.post(
        "/api/v1/transactions", headers=member_headers, json=_payload(sales.id),
    )
    assert res.status_code == 201
    body = res.json()
    assert body["user_id"] == str(member.id)
    assert body["category"]["name"] == "Satış"

    logs = (await test_db.execute(select(ActivityLog))).scalars().all()
    assert [(log.action, log.entity_type) for log in logs] == [("created", "transaction")]
    assert logs[0].details["amount"] == 1500.0


async def test_create_with_unknown_category_is_404(client, member_headers):
    res = await client.post(
        "/api/v1/transactions", headers=member_headers,
        json=_payload("00000000-0000-0000-0000-000000000000"),
    )
    assert res.status_code == 404


async def test_amount_must_be_positive(client, member_headers, sales):
    res = await client.post(
        "/api/v1/transactions", headers=member_headers,
        json=_payload(sales.id, amount=0),
    )
    assert res.status_code == 400


async def test_member_only_lists_own(client, member_headers, sales, other_tx):
    await client.post(
        "/api/v1/transactions", headers=member_headers, json=_payload(sales.id),
    )
    res = await client.get("/api/v1/transactions", headers=member_headers)
    body = res.json()
    assert [t["description"] for t in body["transactions"]] == ["Web projesi"]
    assert body["pagination"]["total"] == 1


async def test_admin_lists_all(client, admin_headers, member_headers, sales, other_tx):
    await client.post(
        "/api/v1/transactions", headers=member_headers, json=_payload(sales.id),
    )
    res = await client.get("/api/v1/transactions", headers=admin_headers)
    assert res.json()["pagination"]["total"] == 2


async def test_other_users_transaction_is_404(client, member_headers, other_tx):
    res = await client.get(f"/api/v1/transactions/{other_tx.id}", headers=member_headers)
    assert res.status_code == 404
    res = await client.delete(f"/api/v1/transactions/{other_tx.id}", headers=member_headers)
    assert res.status_code == 404


async def test_filters_and_paging(client, member_headers, sales):
    for day in (3, 8, 12):
        await client.post("/api/v1/transactions", headers=member_headers, json=_payload(
            sales.id, description=f"Gün {day}", date=f"2024-01-{day:02d}T12:00:00Z",
        ))
    await client.post("/api/v1/transactions", headers=member_headers, json=_payload(
        sales.id, type="EXPENSE", description="Gider",
        date="2024-01-20T12:00:00Z",
    ))

    res = await client.get(
        "/api/v1/transactions?type=INCOME&limit=2&page=1", headers=member_headers,
    )
    body = res.json()
    assert [t["description"] for t in body["transactions"]] == ["Gün 12", "Gün 8"]
    assert body["pagination"] == {"total": 3, "page": 1, "limit": 2, "total_pages": 2}

    res = await client.get(
        "/api/v1/transactions",
        params={"start_date": "2024-01-05T00:00:00Z", "end_date": "2024-01-15T00:00:00Z"},
        headers=member_headers,
    )
    assert {t["description"] for t in res.json()["transactions"]} == {"Gün 8", "Gün 12"}


async def test_update_and_delete(client, member_headers, sales, test_db):
    created = (await client.post(
        "/api/v1/transactions", headers=member_headers, json=_payload(sales.id),
    )).json()

    res = await client.put(
        f"/api/v1/transactions/{created['id']}", headers=member_headers,
        json=_payload(sales.id, amount=2000.0, description="Güncellendi"),
    )
    assert res.status_code == 200
    assert res.json()["amount"] == 2000.0

    res = await client.delete(f"/api/v1/transactions/{created['id']}", headers=member_headers)
    assert res.status_code == 200

    remaining = (await test_db.execute(select(Transaction))).scalars().all()
    assert remaining == []
    actions = (await test_db.execute(
        select(ActivityLog.action).order_by(ActivityLog.created_at),
    )).scalars().all()
    assert actions == ["created", "updated", "deleted"]
