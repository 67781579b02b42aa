"""
Test comment listing, posting, replies, edits and soft deletes
"""

import pytest

from app.core.config import settings
from app.models import Comment, Video


@pytest.fixture
def no_comment_cooldown(monkeypatch):
    monkeypatch.setattr(settings, "comment_cooldown_ms", 0)


def _post(client, video, headers, message="First!"):
    return client.post(
        f"/api/videos/{video.id}/comment", json={"message": message}, headers=headers
    )


# ==================== Posting ====================


def test_post_comment(client, db, alice, video):
    response = _post(client, video, alice, "  Great video  ")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["comment"]["message"] == "Great video"
    assert body["comment"]["parent_comment_id"] is None
    assert body["comment"]["user"]["username"] == "alice"

    db.expire_all()
    assert db.query(Video).filter(Video.id == video.id).first().comment_count == 1


def test_post_comment_requires_authentication(client, video):
    response = client.post(f"/api/videos/{video.id}/comment", json={"message": "hi"})
    assert response.status_code == 401


@pytest.mark.parametrize("message", ["", "   ", "\u200e\u200f", None])
def test_blank_comment_is_rejected(client, alice, video, message):
    response = _post(client, video, alice, message)

    assert response.status_code == 400
    assert response.json()["detail"] == "Comment message is required"


def test_long_comment_is_rejected(client, alice, video):
    response = _post(client, video, alice, "x" * (settings.comment_max_length + 1))

    assert response.status_code == 400
    assert response.json()["detail"] == "Comment must be 5000 characters or less"


def test_comment_on_unknown_video_is_404(client, alice):
    response = client.post(
        "/api/videos/missing/comment", json={"message": "hi"}, headers=alice
    )
    assert response.status_code == 404


def test_comment_cooldown(client, alice, video):
    _post(client, video, alice)
    response = _post(client, video, alice, "Second!")

    assert response.status_code == 429
    assert response.json()["message"] == "Please wait 5 seconds before commenting again"


def test_comment_cooldown_is_per_user(client, alice, bob, video):
    _post(client, video, alice)
    response = _post(client, video, bob)

    assert response.status_code == 200


# ==================== Replies ====================


def test_reply(client, alice, bob, video):
    parent = _post(client, video, alice).json()["comment"]

    response = client.post(
        f"/api/videos/{video.id}/comments/{parent['id']}/reply",
        json={"message": "Agreed"},
        headers=bob,
    )

    assert response.status_code == 200
    reply = response.json()["reply"]
    assert reply["parent_comment_id"] == parent["id"]
    assert reply["message"] == "Agreed"


def test_reply_shares_comment_cooldown(client, alice, video):
    parent = _post(client, video, alice).json()["comment"]

    response = client.post(
        f"/api/videos/{video.id}/comments/{parent['id']}/reply",
        json={"message": "Also me"},
        headers=alice,
    )

    assert response.status_code == 429
    assert response.json()["message"] == "Please wait 5 seconds before replying again"


def test_reply_to_missing_parent_is_404(client, alice, video):
    response = client.post(
        f"/api/videos/{video.id}/comments/missing/reply",
        json={"message": "Hello?"},
        headers=alice,
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "Parent comment not found"


def test_blank_reply_is_rejected(client, alice, bob, video):
    parent = _post(client, video, alice).json()["comment"]

    response = client.post(
        f"/api/videos/{video.id}/comments/{parent['id']}/reply",
        json={"message": " "},
        headers=bob,
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Reply message is required"


def test_reply_to_deleted_comment_is_rejected(client, alice, bob, video):
    parent = _post(client, video, alice).json()["comment"]
    client.delete(
        f"/api/videos/{video.id}/comments/{parent['id']}/delete", headers=alice
    )

    response = client.post(
        f"/api/videos/{video.id}/comments/{parent['id']}/reply",
        json={"message": "Too late"},
        headers=bob,
    )
    assert response.status_code == 400


# ==================== Listing ====================


def test_list_comments_is_flat_and_paginated(
    client, alice, bob, video, no_comment_cooldown
):
    parent = _post(client, video, alice).json()["comment"]
    client.post(
        f"/api/videos/{video.id}/comments/{parent['id']}/reply",
        json={"message": "Reply"},
        headers=bob,
    )
    _post(client, video, alice, "Another")

    response = client.get(f"/api/videos/{video.id}/comments?pageSize=2")

    body = response.json()
    assert body["success"] is True
    assert len(body["comments"]) == 2
    assert body["pagination"] == {"page": 1, "pageSize": 2, "total": 3, "totalPages": 2}
    assert body["userEngagement"] == {"likedComments": [], "dislikedComments": []}


def test_list_comments_popular_sort(client, db, alice, bob, video, no_comment_cooldown):
    quiet = _post(client, video, alice, "Quiet").json()["comment"]
    loud = _post(client, video, alice, "Loud").json()["comment"]
    client.post(f"/api/videos/{video.id}/comments/{loud['id']}/like", headers=bob)

    response = client.get(f"/api/videos/{video.id}/comments?sort=popular")

    ids = [comment["id"] for comment in response.json()["comments"]]
    assert ids == [loud["id"], quiet["id"]]


def test_list_comments_search(client, alice, video, no_comment_cooldown):
    _post(client, video, alice, "Love the colours")
    _post(client, video, alice, "Too short")

    response = client.get(f"/api/videos/{video.id}/comments?search=colour")

    comments = response.json()["comments"]
    assert [comment["message"] for comment in comments] == ["Love the colours"]


def test_list_comments_user_engagement(client, alice, bob, video, no_comment_cooldown):
    liked = _post(client, video, alice, "Liked").json()["comment"]
    disliked = _post(client, video, alice, "Disliked").json()["comment"]
    client.post(f"/api/videos/{video.id}/comments/{liked['id']}/like", headers=bob)
    client.post(
        f"/api/videos/{video.id}/comments/{disliked['id']}/dislike", headers=bob
    )

    response = client.get(f"/api/videos/{video.id}/comments", headers=bob)

    assert response.json()["userEngagement"] == {
        "likedComments": [liked["id"]],
        "dislikedComments": [disliked["id"]],
    }


def test_list_comments_rejects_unknown_sort(client, video):
    response = client.get(f"/api/videos/{video.id}/comments?sort=random")
    assert response.status_code == 422


# ==================== Edit / Delete ====================


def test_edit_comment(client, alice, video):
    comment = _post(client, video, alice).json()["comment"]

    response = client.patch(
        f"/api/videos/{video.id}/comments/{comment['id']}/edit",
        json={"message": "Edited"},
        headers=alice,
    )

    assert response.status_code == 200
    assert response.json()["comment"]["message"] == "Edited"
    assert response.json()["comment"]["is_edited"] is True


def test_edit_someone_elses_comment_is_forbidden(client, alice, bob, video):
    comment = _post(client, video, alice).json()["comment"]

    response = client.patch(
        f"/api/videos/{video.id}/comments/{comment['id']}/edit",
        json={"message": "Mine now"},
        headers=bob,
    )

    assert response.status_code == 403
    assert response.json()["detail"] == "You can only edit your own comments"


def test_delete_comment(client, db, alice, video):
    comment = _post(client, video, alice).json()["comment"]

    response = client.delete(
        f"/api/videos/{video.id}/comments/{comment['id']}/delete", headers=alice
    )

    assert response.json() == {
        "success": True,
        "message": "Comment deleted successfully",
    }

    listing = client.get(f"/api/videos/{video.id}/comments").json()
    assert listing["comments"] == []

    db.expire_all()
    stored = db.query(Comment).filter(Comment.id == comment["id"]).first()
    assert stored.visible is False
    assert stored.video.comment_count == 0


def test_delete_twice_is_rejected(client, alice, video):
    comment = _post(client, video, alice).json()["comment"]
    url = f"/api/videos/{video.id}/comments/{comment['id']}/delete"

    client.delete(url, headers=alice)
    response = client.delete(url, headers=alice)

    assert response.status_code == 400
    assert response.json()["detail"] == "Comment already deleted"


def test_delete_someone_elses_comment_is_forbidden(client, alice, bob, video):
    comment = _post(client, video, alice).json()["comment"]

    response = client.delete(
        f"/api/videos/{video.id}/comments/{comment['id']}/delete", headers=bob
    )
    assert response.status_code == 403
