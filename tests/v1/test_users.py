# tests/v1/test_users.py
"""API tests for profiles, user timelines and follows."""

from fastapi import status
from fastapi.testclient import TestClient

from kindred.models import PostStatus, Profile


class TestProfiles:
    def test_profile_with_stats_and_follow_state(
        self,
        client: TestClient,
        make_post,
        alice: Profile,
        bob: Profile,
        bob_headers: dict[str, str],
    ) -> None:
        make_post(alice, "visible")
        make_post(alice, "hidden", status=PostStatus.REJECTED)

        before = client.get(f"/api/v1/users/{alice.id}", headers=bob_headers).json()
        assert before["stats"]["posts_count"] == 1
        assert before["is_following"] is False

        follow = client.post(f"/api/v1/users/{alice.id}/follow", headers=bob_headers)
        assert follow.status_code == status.HTTP_200_OK
        assert follow.json() == {"user_id": alice.id, "is_following": True, "followers_count": 1}

        after = client.get(f"/api/v1/users/{alice.id}", headers=bob_headers).json()
        assert after["is_following"] is True
        assert after["stats"]["followers_count"] == 1

    def test_update_me(self, client: TestClient, alice: Profile, alice_headers: dict[str, str]) -> None:
        response = client.put("/api/v1/users/me", json={"avatar_url": "https://cdn.test/me.png"}, headers=alice_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["avatar_url"] == "https://cdn.test/me.png"
        assert response.json()["full_name"] == "Alice"

        me = client.get("/api/v1/users/me", headers=alice_headers).json()
        assert me["id"] == alice.id
        assert me["avatar_url"] == "https://cdn.test/me.png"

    def test_me_requires_authentication(self, client: TestClient) -> None:
        assert client.get("/api/v1/users/me").status_code == status.HTTP_401_UNAUTHORIZED
        assert client.put("/api/v1/users/me", json={}).status_code == status.HTTP_401_UNAUTHORIZED

    def test_unknown_user(self, client: TestClient) -> None:
        response = client.get("/api/v1/users/nobody")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"error": "User not found"}

    def test_user_posts_show_only_approved(
        self, client: TestClient, make_post, alice: Profile, alice_headers: dict[str, str]
    ) -> None:
        visible = make_post(alice, "visible")
        make_post(alice, "pending", status=PostStatus.PENDING)
        make_post(alice, "hidden", status=PostStatus.REJECTED)

        posts = client.get(f"/api/v1/users/{alice.id}/posts", headers=alice_headers).json()

        assert [post["id"] for post in posts] == [visible.id]


class TestFollowApi:
    def test_follow_lists_and_unfollow(
        self,
        client: TestClient,
        alice: Profile,
        bob: Profile,
        carol: Profile,
        auth_headers,
    ) -> None:
        client.post(f"/api/v1/users/{carol.id}/follow", headers=auth_headers(alice))
        client.post(f"/api/v1/users/{carol.id}/follow", headers=auth_headers(bob))
        client.post(f"/api/v1/users/{bob.id}/follow", headers=auth_headers(alice))

        followers = client.get(f"/api/v1/users/{carol.id}/followers", headers=auth_headers(alice)).json()
        assert {entry["id"]: entry["is_following"] for entry in followers} == {alice.id: False, bob.id: True}

        following = client.get(f"/api/v1/users/{alice.id}/following").json()
        assert {entry["id"] for entry in following} == {bob.id, carol.id}

        unfollow = client.delete(f"/api/v1/users/{carol.id}/follow", headers=auth_headers(alice))
        assert unfollow.json() == {"user_id": carol.id, "is_following": False, "followers_count": 1}
        again = client.delete(f"/api/v1/users/{carol.id}/follow", headers=auth_headers(alice))
        assert again.status_code == status.HTTP_200_OK

    def test_self_follow_is_a_bad_request(self, client: TestClient, alice: Profile, alice_headers: dict[str, str]) -> None:
        response = client.post(f"/api/v1/users/{alice.id}/follow", headers=alice_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "You cannot follow yourself"}
