"""Project Member Routes - adding, re-roling and removing members.

Invariants:
    - Only owners (or admins) change membership
    - A user joins a project once (ALREADY_MEMBER)
    - The last owner can be neither demoted nor removed (LAST_OWNER)
"""


def _owner_entry(body):
    return next(m for m in body if m["role"] == "OWNER")


async def test_list_members(client, project, member, member_headers):
    res = await client.get(f"/api/v1/projects/{project.id}/members", headers=member_headers)
    assert res.status_code == 200
    assert res.json()[0]["user"]["email"] == member.email


async def test_owner_adds_member(client, project, other_member, member_headers):
    res = await client.post(
        f"/api/v1/projects/{project.id}/members", headers=member_headers,
        json={"user_id": str(other_member.id), "role": "VIEWER"},
    )
    assert res.status_code == 201
    assert res.json()["role"] == "VIEWER"
    assert res.json()["user"]["name"] == other_member.name


async def test_add_twice_is_rejected(client, project, member, member_headers):
    res = await client.post(
        f"/api/v1/projects/{project.id}/members", headers=member_headers,
        json={"user_id": str(member.id)},
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "ALREADY_MEMBER"


async def test_add_unknown_user_is_404(client, project, member_headers):
    res = await client.post(
        f"/api/v1/projects/{project.id}/members", headers=member_headers,
        json={"user_id": "00000000-0000-0000-0000-000000000000"},
    )
    assert res.status_code == 404


async def test_non_owner_cannot_add(client, project, other_member, other_headers, admin, member_headers):
    await client.post(
        f"/api/v1/projects/{project.id}/members", headers=member_headers,
        json={"user_id": str(other_member.id), "role": "MEMBER"},
    )
    res = await client.post(
        f"/api/v1/projects/{project.id}/members", headers=other_headers,
        json={"user_id": str(admin.id)},
    )
    assert res.status_code == 403


async def test_last_owner_cannot_be_demoted_or_removed(client, project, member_headers):
    members = (await client.get(
        f"/api/v1/projects/{project.id}/members", headers=member_headers,
    )).json()
    owner_id = _owner_entry(members)["id"]

    res = await client.put(
        f"/api/v1/projects/{project.id}/members/{owner_id}", headers=member_headers,
        json={"role": "MEMBER"},
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "LAST_OWNER"

    res = await client.delete(
        f"/api/v1/projects/{project.id}/members/{owner_id}", headers=member_headers,
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "LAST_OWNER"


async def test_second_owner_allows_demotion(client, project, other_member, member_headers):
    await client.post(
        f"/api/v1/projects/{project.id}/members", headers=member_headers,
        json={"user_id": str(other_member.id), "role": "OWNER"},
    )
    members = (await client.get(
        f"/api/v1/projects/{project.id}/members", headers=member_headers,
    )).json()
    mine = next(m for m in members if m["user_id"] != str(other_member.id))

    res = await client.put(
        f"/api/v1/projects/{project.id}/members/{mine['id']}", headers=member_headers,
        json={"role": "VIEWER"},
    )
    assert res.status_code == 200
    assert res.json()["role"] == "VIEWER"


async def test_remove_member(client, project, other_member, member_headers):
    added = (await client.post(
        f"/api/v1/projects/{project.id}/members", headers=member_headers,
        json={"user_id": str(other_member.id)},
    )).json()
    res = await client.delete(
        f"/api/v1/projects/{project.id}/members/{added['id']}", headers=member_headers,
    )
    assert res.status_code == 200
    members = (await client.get(
        f"/api/v1/projects/{project.id}/members", headers=member_headers,
    )).json()
    assert len(members) == 1
