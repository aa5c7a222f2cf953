# tests/v1/test_reactions.py
"""API tests for post reactions."""

from fastapi import status
from fastapi.testclient import TestClient

from kindred.models import PostStatus, Profile


def test_reaction_lifecycle(
    client: TestClient, make_post, alice: Profile, bob_headers: dict[str, str]
) -> None:
    post = make_post(alice)
    url = f"/api/v1/posts/{post.id}/reactions"

    added = client.post(url, json={"reaction_type": "love"}, headers=bob_headers).json()
    assert (added["action"], added["user_reaction"], added["total"]) == ("added", "love", 1)

    updated = client.post(url, json={"reaction_type": "wow"}, headers=bob_headers).json()
    assert updated["action"] == "updated"
    assert updated["reactions_count"]["wow"] == 1
    assert updated["reactions_count"]["love"] == 0

    removed = client.post(url, json={"reaction_type": "wow"}, headers=bob_headers).json()
    assert removed["action"] == "removed"
    assert removed["total"] == 0

    anonymous = client.get(url).json()
    assert anonymous["user_reaction"] is None
    assert anonymous["total"] == 0


def test_empty_body_is_a_quick_like(client: TestClient, make_post, alice: Profile, bob_headers: dict[str, str]) -> None:
    post = make_post(alice)

    response = client.post(f"/api/v1/posts/{post.id}/reactions", headers=bob_headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["user_reaction"] == "like"


def test_unknown_reaction_type_is_rejected(
    client: TestClient, make_post, alice: Profile, bob_headers: dict[str, str]
) -> None:
    post = make_post(alice)
    response = client.post(
        f"/api/v1/posts/{post.id}/reactions", json={"reaction_type": "meh"}, headers=bob_headers
    )
    assert response.status_code == 422


def test_reacting_to_hidden_post_is_not_found(
    client: TestClient, make_post, alice: Profile, bob_headers: dict[str, str]
) -> None:
    post = make_post(alice, "spam", status=PostStatus.REJECTED)

    response = client.post(f"/api/v1/posts/{post.id}/reactions", json={"reaction_type": "like"}, headers=bob_headers)

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"error": "Post not found"}
