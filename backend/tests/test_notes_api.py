"""Expression note endpoints"""

from conftest import auth_headers


async def create(client, user, term, **fields):
    response = await client.post(
        "/v1/notes", json={"term": term, **fields}, headers=auth_headers(user)
    )
    assert response.status_code == 201
    return response.json()["data"]


async def test_create_trims_and_clears(client, make_user):
    user = await make_user()
    note = await create(client, user, "  touch base  ", description="  연락하다 ", example="   ")

    assert note["term"] == "touch base"
    assert note["description"] == "연락하다"
    assert note["example"] is None
    assert note["isStarred"] is False


async def test_blank_term_rejected(client, make_user):
    user = await make_user()
    response = await client.post("/v1/notes", json={"term": "   "}, headers=auth_headers(user))
    assert response.status_code == 400


async def test_search_and_sort(client, make_user):
    user = await make_user()
    await create(client, user, "circle back", description="다시 논의하다")
    await create(client, user, "as per", example="As per our discussion")
    await create(client, user, "bandwidth")
    headers = auth_headers(user)

    data = (await client.get("/v1/notes?sort=term_asc", headers=headers)).json()["data"]
    assert [n["term"] for n in data["notes"]] == ["as per", "bandwidth", "circle back"]

    data = (await client.get("/v1/notes?q=DISCUSSION", headers=headers)).json()["data"]
    assert [n["term"] for n in data["notes"]] == ["as per"]

    data = (await client.get("/v1/notes?q=논의", headers=headers)).json()["data"]
    assert [n["term"] for n in data["notes"]] == ["circle back"]

    data = (await client.get("/v1/notes?limit=2", headers=headers)).json()["data"]
    assert data["pagination"] == {"page": 1, "limit": 2, "total": 3, "totalPages": 2}


async def test_star_toggle_and_latest_sort(client, make_user):
    user = await make_user()
    first = await create(client, user, "first")
    await create(client, user, "second")
    headers = auth_headers(user)

    starred = (await client.patch(f"/v1/notes/{first['id']}/star", headers=headers)).json()["data"]
    assert starred["isStarred"] is True

    data = (await client.get("/v1/notes", headers=headers)).json()["data"]
    assert data["notes"][0]["term"] == "first"

    unstarred = (await client.patch(f"/v1/notes/{first['id']}/star", headers=headers)).json()["data"]
    assert unstarred["isStarred"] is False


async def test_update_delete_and_ownership(client, make_user):
    owner = await make_user()
    other = await make_user(email="other@example.com")
    note = await create(client, owner, "follow up", description="후속 조치")

    response = await client.put(
        f"/v1/notes/{note['id']}", json={"description": ""}, headers=auth_headers(owner)
    )
    updated = response.json()["data"]
    assert updated["term"] == "follow up"
    assert updated["description"] is None

    response = await client.get(f"/v1/notes/{note['id']}", headers=auth_headers(other))
    assert response.status_code == 403
    assert response.json()["error"]["message"] == "접근 권한이 없습니다."

    response = await client.delete(f"/v1/notes/{note['id']}", headers=auth_headers(owner))
    assert response.json() == {"ok": True}

    response = await client.get(f"/v1/notes/{note['id']}", headers=auth_headers(owner))
    assert response.status_code == 404
    assert response.json()["error"]["message"] == "용어를 찾을 수 없습니다."


async def test_invalid_sort(client, make_user):
    user = await make_user()
    response = await client.get("/v1/notes?sort=random", headers=auth_headers(user))
    assert response.status_code == 400
