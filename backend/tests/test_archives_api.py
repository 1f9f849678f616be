"""Archive endpoints"""

from datetime import datetime, timedelta

from conftest import auth_headers
from sayitright.models.archive import Archive, make_preview


def add_archive(db, user_id, content="archived email body", **fields):
    archive = Archive(user_id=user_id, content=content, preview=make_preview(content), **fields)
    db.add(archive)
    return archive


async def test_list_newest_first_with_preview(client, make_user, db_session):
    user = await make_user()
    now = datetime.utcnow()
    add_archive(db_session, user.id, content="older", created_at=now - timedelta(hours=2))
    add_archive(db_session, user.id, content="x" * 300, created_at=now)
    await db_session.commit()

    response = await client.get("/v1/archives", headers=auth_headers(user))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["total"] == 2
    assert data["items"][0]["preview"] == "x" * 197 + "..."
    assert "content" not in data["items"][0]
    assert data["items"][1]["preview"] == "older"


async def test_list_only_own_archives(client, make_user, db_session):
    user = await make_user()
    other = await make_user(email="other@example.com")
    add_archive(db_session, other.id)
    await db_session.commit()

    data = (await client.get("/v1/archives", headers=auth_headers(user))).json()["data"]
    assert data == {"items": [], "total": 0, "page": 1, "limit": 20}


async def test_filter_by_relationship(client, make_user, db_session):
    user = await make_user()
    add_archive(db_session, user.id, relationship="professor")
    add_archive(db_session, user.id, relationship="동아리 선배")
    await db_session.commit()
    headers = auth_headers(user)

    data = (await client.get("/v1/archives?relationship=professor", headers=headers)).json()["data"]
    assert [i["relationship"] for i in data["items"]] == ["professor"]

    data = (await client.get("/v1/archives?relationship=__other__", headers=headers)).json()["data"]
    assert [i["relationship"] for i in data["items"]] == ["동아리 선배"]


async def test_get_and_delete(client, make_user, db_session):
    owner = await make_user()
    other = await make_user(email="other@example.com")
    archive = add_archive(db_session, owner.id, rationale="because")
    await db_session.commit()

    response = await client.get(f"/v1/archives/{archive.id}", headers=auth_headers(owner))
    assert response.json()["data"]["rationale"] == "because"

    response = await client.delete(f"/v1/archives/{archive.id}", headers=auth_headers(other))
    assert response.status_code == 403
    assert response.json()["error"]["message"] == "이 Archive에 접근할 권한이 없습니다."

    response = await client.delete(f"/v1/archives/{archive.id}", headers=auth_headers(owner))
    assert response.status_code == 200

    response = await client.get(f"/v1/archives/{archive.id}", headers=auth_headers(owner))
    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Archive를 찾을 수 없습니다."


async def test_pagination_bounds(client, make_user):
    user = await make_user()
    response = await client.get("/v1/archives?limit=500", headers=auth_headers(user))
    assert response.status_code == 400
