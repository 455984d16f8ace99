"""Task Routes - creation order, edit rights, reorder, labels and filters.

Invariants:
    - New tasks land at the bottom of their column (highest order + 1)
    - VIEWER members can read but not write
    - Reorder moves one card; its siblings keep their order
"""

import pytest
from sqlalchemy import select

from alphacore.models.project import ProjectMember
from alphacore.models.task import Label, Task, task_labels


@pytest.fixture
async def labels(test_db):
    urgent = Label(name="Acil", color="#ef4444")
    design = Label(name="Tasarım", color="#8b5cf6")
    test_db.add_all([urgent, design])
    await test_db.commit()
    return urgent, design


@pytest.fixture
async def viewer(test_db, project, other_member):
    test_db.add(ProjectMember(project_id=project.id, user_id=other_member.id, role="VIEWER"))
    await test_db.commit()
    return other_member


async def _create(client, headers, project_id, **fields):
    body = {"title": "Görev", "project_id": str(project_id), **fields}
    return await client.post("/api/v1/tasks", headers=headers, json=body)


async def test_create_task_goes_to_bottom_of_column(client, project, member, member_headers):
    first = await _create(client, member_headers, project.id, title="Bir")
    second = await _create(client, member_headers, project.id, title="İki")
    other_column = await _create(client, member_headers, project.id, title="Üç", status="DONE")

    assert first.status_code == 201
    assert first.json()["order"] == 1
    assert second.json()["order"] == 2
    assert other_column.json()["order"] == 1
    assert first.json()["creator"]["id"] == str(member.id)
    assert first.json()["project"]["name"] == project.name


async def test_create_with_labels_and_assignee(client, project, member, member_headers, labels):
    urgent, design = labels
    res = await _create(
        client, member_headers, project.id,
        assignee_id=str(member.id), label_ids=[str(urgent.id), str(design.id)],
        due_date="2024-02-01T00:00:00Z",
    )
    assert res.status_code == 201
    body = res.json()
    assert {label["name"] for label in body["labels"]} == {"Acil", "Tasarım"}
    assert body["assignee"]["name"] == member.name


async def test_unknown_label_is_404(client, project, member_headers):
    res = await _create(
        client, member_headers, project.id,
        label_ids=["00000000-0000-0000-0000-000000000000"],
    )
    assert res.status_code == 404


async def test_unknown_assignee_is_404(client, project, member_headers):
    res = await _create(
        client, member_headers, project.id,
        assignee_id="00000000-0000-0000-0000-000000000000",
    )
    assert res.status_code == 404


async def test_viewer_cannot_create_but_can_read(client, project, viewer, member_headers, other_headers):
    res = await _create(client, other_headers, project.id)
    assert res.status_code == 403

    created = (await _create(client, member_headers, project.id)).json()
    res = await client.get(f"/api/v1/tasks/{created['id']}", headers=other_headers)
    assert res.status_code == 200


async def test_outsider_cannot_read_task(client, project, member_headers, other_headers):
    created = (await _create(client, member_headers, project.id)).json()
    res = await client.get(f"/api/v1/tasks/{created['id']}", headers=other_headers)
    assert res.status_code == 403


async def test_list_filters_and_scope(client, project, member, member_headers, other_headers):
    await _create(client, member_headers, project.id, title="Benim", assignee_id=str(member.id))
    await _create(client, member_headers, project.id, title="Açık", status="IN_PROGRESS")

    res = await client.get(
        "/api/v1/tasks", params={"assignee_id": str(member.id)}, headers=member_headers,
    )
    assert [t["title"] for t in res.json()] == ["Benim"]

    res = await client.get("/api/v1/tasks?status=IN_PROGRESS", headers=member_headers)
    assert [t["title"] for t in res.json()] == ["Açık"]
    assert res.json()[0]["project"]["id"] == str(project.id)
    assert res.json()[0]["comment_count"] == 0

    # Not a member of the project: nothing visible
    res = await client.get("/api/v1/tasks", headers=other_headers)
    assert res.json() == []


async def test_reorder_moves_only_one_card(client, project, member_headers, test_db):
    a = (await _create(client, member_headers, project.id, title="A")).json()
    b = (await _create(client, member_headers, project.id, title="B")).json()

    res = await client.patch("/api/v1/tasks/reorder", headers=member_headers, json={
        "task_id": a["id"], "status": "IN_PROGRESS", "order": 0,
    })
    assert res.status_code == 200
    assert res.json()["status"] == "IN_PROGRESS"
    assert res.json()["order"] == 0

    b_row = (await test_db.execute(
        select(Task).where(Task.title == "B"),
    )).scalar_one()
    assert b_row.order == b["order"]
    assert b_row.status == "TODO"


async def test_reorder_rejects_negative_order(client, project, member_headers):
    a = (await _create(client, member_headers, project.id)).json()
    res = await client.patch("/api/v1/tasks/reorder", headers=member_headers, json={
        "task_id": a["id"], "status": "TODO", "order": -1,
    })
    assert res.status_code == 400


async def test_viewer_cannot_reorder(client, project, viewer, member_headers, other_headers):
    a = (await _create(client, member_headers, project.id)).json()
    res = await client.patch("/api/v1/tasks/reorder", headers=other_headers, json={
        "task_id": a["id"], "status": "DONE", "order": 1,
    })
    assert res.status_code == 403


async def test_update_task_replaces_labels(client, project, member_headers, labels):
    urgent, design = labels
    created = (await _create(
        client, member_headers, project.id, label_ids=[str(urgent.id)],
    )).json()

    res = await client.put(f"/api/v1/tasks/{created['id']}", headers=member_headers, json={
        "title": "Güncel", "status": "IN_REVIEW", "priority": "HIGH",
        "label_ids": [str(design.id)], "due_date": "",
    })
    assert res.status_code == 200
    body = res.json()
    assert body["title"] == "Güncel"
    assert body["due_date"] is None
    assert [label["name"] for label in body["labels"]] == ["Tasarım"]


async def test_update_without_label_ids_keeps_labels(client, project, member_headers, labels):
    urgent, _ = labels
    created = (await _create(
        client, member_headers, project.id, label_ids=[str(urgent.id)],
    )).json()
    res = await client.put(f"/api/v1/tasks/{created['id']}", headers=member_headers, json={
        "title": "Aynı etiket", "status": "TODO", "priority": "LOW",
    })
    assert [label["name"] for label in res.json()["labels"]] == ["Acil"]


async def test_delete_task_clears_label_links(client, project, member_headers, labels, test_db):
    urgent, _ = labels
    created = (await _create(
        client, member_headers, project.id, label_ids=[str(urgent.id)],
    )).json()
    res = await client.delete(f"/api/v1/tasks/{created['id']}", headers=member_headers)
    assert res.status_code == 200
    assert (await test_db.execute(select(task_labels))).all() == []
    assert (await test_db.execute(select(Label))).scalars().all() != []
