from app.db.models import ProfileType


async def _follow(client, headers, target_id):
    resp = await client.post(
        f"/relationships/{target_id}/action", json={"action": "send"}, headers=headers
    )
    assert resp.status_code == 200


async def test_get_profile(client, make_user, auth_headers):
    me, other = await make_user(), await make_user(ProfileType.PRIVATE, name="Private Pat")

    resp = await client.get(f"/users/{other.id}", headers=await auth_headers(me))

    assert resp.status_code == 200
    body = resp.json()
    assert body["id"] == other.id
    assert body["name"] == "Private Pat"
    assert body["profileType"] == "Private"
    assert "passwordHash" not in body


async def test_get_profile_unknown(client, make_user, auth_headers):
    me = await make_user()
    resp = await client.get("/users/9999", headers=await auth_headers(me))
    assert resp.status_code == 404
    assert resp.json() == {"message": "User not found."}


async def test_can_view(client, make_user, auth_headers):
    viewer = await make_user()
    private = await make_user(ProfileType.PRIVATE)
    viewer_headers = await auth_headers(viewer)

    resp = await client.get(f"/users/{private.id}/can-view", headers=viewer_headers)
    assert resp.json() == {"canView": False, "reason": "private_profile"}

    await _follow(client, viewer_headers, private.id)
    await client.post(
        f"/relationships/{viewer.id}/action",
        json={"action": "accept"},
        headers=await auth_headers(private),
    )

    resp = await client.get(f"/users/{private.id}/can-view", headers=viewer_headers)
    assert resp.json() == {"canView": True, "reason": "follower"}

    resp = await client.get(f"/users/{viewer.id}/can-view", headers=viewer_headers)
    assert resp.json() == {"canView": True, "reason": "own_profile"}


async def test_can_view_unknown_user(client, make_user, auth_headers):
    me = await make_user()
    resp = await client.get("/users/9999/can-view", headers=await auth_headers(me))
    assert resp.status_code == 404


async def test_follower_counts_and_lists(client, make_user, auth_headers):
    star = await make_user(ProfileType.PUBLIC)
    fan_a, fan_b = await make_user(), await make_user()
    a_headers = await auth_headers(fan_a)

    await _follow(client, a_headers, star.id)
    await _follow(client, await auth_headers(fan_b), star.id)
    await _follow(client, a_headers, fan_b.id)

    resp = await client.get(f"/users/{star.id}/follower-counts", headers=a_headers)
    assert resp.json() == {"followers": 2, "following": 0}

    resp = await client.get(f"/users/{star.id}/followers", headers=a_headers)
    assert resp.status_code == 200
    followers = {item["userId"]: item["youFollowThem"] for item in resp.json()}
    assert followers == {fan_a.id: False, fan_b.id: True}

    resp = await client.get(f"/users/{fan_a.id}/following", headers=a_headers)
    assert {item["userId"] for item in resp.json()} == {star.id, fan_b.id}
    assert all(item["status"] == "Accepted" for item in resp.json())


async def test_update_settings_switches_profile_type(client, make_user, auth_headers):
    me, follower = await make_user(ProfileType.PUBLIC), await make_user()
    my_headers = await auth_headers(me)

    resp = await client.put(
        f"/users/{me.id}/settings", json={"profileType": "Private"}, headers=my_headers
    )
    assert resp.status_code == 200
    assert resp.json() == {"message": "Profile settings updated successfully."}

    resp = await client.post(
        f"/relationships/{me.id}/action",
        json={"action": "send"},
        headers=await auth_headers(follower),
    )
    assert resp.json() == {"message": "Follow request sent!"}


async def test_update_settings_for_someone_else_forbidden(client, make_user, auth_headers):
    me, other = await make_user(), await make_user()

    resp = await client.put(
        f"/users/{other.id}/settings",
        json={"profileType": "Private"},
        headers=await auth_headers(me),
    )

    assert resp.status_code == 403


async def test_update_settings_rejects_unknown_profile_type(client, make_user, auth_headers):
    me = await make_user()

    resp = await client.put(
        f"/users/{me.id}/settings",
        json={"profileType": "Secret"},
        headers=await auth_headers(me),
    )

    assert resp.status_code == 422
