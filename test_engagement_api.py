"""
Test video/comment reaction toggles, cooldowns, watch-time gate and views
"""

from app.core.config import settings
from app.models import Comment, User, Video


def _comment(db, video, user_id="user-carol", **fields):
    db.add(User(id=user_id, username=user_id))
    comment = Comment(video_id=video.id, user_id=user_id, message="Nice!", **fields)
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return comment


# ==================== Auth / Not Found ====================


def test_like_requires_authentication(client, video):
    response = client.post(f"/api/videos/{video.id}/like")
    assert response.status_code == 401


def test_like_rejects_invalid_token(client, video):
    response = client.post(
        f"/api/videos/{video.id}/like",
        headers={"Authorization": "Bearer not-a-token"},
    )
    assert response.status_code == 401


def test_like_unknown_video_is_404(client, alice):
    response = client.post("/api/videos/missing/like", headers=alice)
    assert response.status_code == 404
    assert response.json()["detail"] == "Video not found"


def test_first_request_creates_profile(client, db, alice, video):
    client.post(f"/api/videos/{video.id}/like", headers=alice)

    user = db.query(User).filter(User.id == "user-alice").first()
    assert user is not None
    assert user.username == "alice"


# ==================== Video Reactions ====================


def test_like_video(client, alice, video):
    response = client.post(f"/api/videos/{video.id}/like", headers=alice)

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "action": "liked",
        "liked": True,
        "like_count": 1,
        "dislike_count": 0,
    }


def test_like_toggles_off(client, alice, video, monkeypatch):
    monkeypatch.setattr(settings, "like_cooldown_ms", 0)

    client.post(f"/api/videos/{video.id}/like", headers=alice)
    response = client.post(f"/api/videos/{video.id}/like", headers=alice)

    data = response.json()
    assert data["action"] == "unliked"
    assert data["liked"] is False
    assert data["like_count"] == 0


def test_dislike_clears_like(client, db, alice, video):
    client.post(f"/api/videos/{video.id}/like", headers=alice)
    response = client.post(f"/api/videos/{video.id}/dislike", headers=alice)

    data = response.json()
    assert data["disliked"] is True
    assert data["like_count"] == 0
    assert data["dislike_count"] == 1

    db.expire_all()
    stored = db.query(Video).filter(Video.id == video.id).first()
    assert stored.like_count == 0
    assert stored.dislike_count == 1


def test_counts_are_per_user(client, alice, bob, video):
    client.post(f"/api/videos/{video.id}/like", headers=alice)
    response = client.post(f"/api/videos/{video.id}/like", headers=bob)

    assert response.json()["like_count"] == 2


def test_repeated_like_is_rate_limited(client, alice, video):
    client.post(f"/api/videos/{video.id}/like", headers=alice)
    response = client.post(f"/api/videos/{video.id}/like", headers=alice)

    assert response.status_code == 429
    body = response.json()
    assert body["error"] == "Rate limit exceeded"
    assert body["message"] == "Please wait 1 second before liking/unliking again"
    assert 0 < body["remainingMs"] <= settings.like_cooldown_ms


def test_rate_limited_toggle_leaves_state_untouched(client, db, alice, video):
    client.post(f"/api/videos/{video.id}/like", headers=alice)
    client.post(f"/api/videos/{video.id}/like", headers=alice)

    db.expire_all()
    stored = db.query(Video).filter(Video.id == video.id).first()
    assert stored.like_count == 1


def test_cooldowns_are_per_action(client, alice, video):
    client.post(f"/api/videos/{video.id}/like", headers=alice)
    response = client.post(f"/api/videos/{video.id}/dislike", headers=alice)

    assert response.status_code == 200


# ==================== Stars ====================


def test_star_below_threshold_is_rejected(client, alice, video):
    response = client.post(
        f"/api/videos/{video.id}/star",
        json={"watchedSeconds": 19},
        headers=alice,
    )

    assert response.status_code == 403
    body = response.json()
    assert body["error"] == "Insufficient watch time"
    assert body["requiredSeconds"] == 20
    assert body["watchedSeconds"] == 19


def test_star_at_threshold(client, alice, video):
    response = client.post(
        f"/api/videos/{video.id}/star",
        json={"watchedSeconds": 20},
        headers=alice,
    )

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "action": "starred",
        "starred": True,
        "star_count": 1,
    }


def test_star_without_body_counts_as_unwatched(client, alice, video):
    response = client.post(f"/api/videos/{video.id}/star", headers=alice)
    assert response.status_code == 403


def test_unstar_needs_no_watch_time(client, alice, video, monkeypatch):
    monkeypatch.setattr(settings, "star_cooldown_ms", 0)

    client.post(
        f"/api/videos/{video.id}/star", json={"watchedSeconds": 50}, headers=alice
    )
    response = client.post(
        f"/api/videos/{video.id}/star", json={"watchedSeconds": 0}, headers=alice
    )

    data = response.json()
    assert data["action"] == "unstarred"
    assert data["starred"] is False
    assert data["star_count"] == 0


def test_star_does_not_touch_like(client, db, alice, video):
    client.post(f"/api/videos/{video.id}/like", headers=alice)
    client.post(
        f"/api/videos/{video.id}/star", json={"watchedSeconds": 30}, headers=alice
    )

    db.expire_all()
    stored = db.query(Video).filter(Video.id == video.id).first()
    assert stored.like_count == 1
    assert stored.star_count == 1


# ==================== Comment Reactions ====================


def test_like_comment(client, db, alice, video):
    comment = _comment(db, video)

    response = client.post(
        f"/api/videos/{video.id}/comments/{comment.id}/like", headers=alice
    )

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "action": "liked",
        "liked": True,
        "like_count": 1,
        "dislike_count": 0,
    }


def test_comment_dislike_clears_like(client, db, alice, video):
    comment = _comment(db, video)

    client.post(f"/api/videos/{video.id}/comments/{comment.id}/like", headers=alice)
    response = client.post(
        f"/api/videos/{video.id}/comments/{comment.id}/dislike", headers=alice
    )

    data = response.json()
    assert data["disliked"] is True
    assert data["like_count"] == 0
    assert data["dislike_count"] == 1


def test_comment_like_cooldown(client, db, alice, video):
    comment = _comment(db, video)

    client.post(f"/api/videos/{video.id}/comments/{comment.id}/like", headers=alice)
    response = client.post(
        f"/api/videos/{video.id}/comments/{comment.id}/like", headers=alice
    )

    assert response.status_code == 429
    assert response.json()["message"] == (
        "Please wait 3 seconds before liking/unliking again"
    )


def test_comment_on_other_video_is_404(client, db, alice, video):
    other = Video(title="Other", duration=10)
    db.add(other)
    db.commit()
    comment = _comment(db, other)

    response = client.post(
        f"/api/videos/{video.id}/comments/{comment.id}/like", headers=alice
    )
    assert response.status_code == 404


def test_hidden_comment_is_404(client, db, alice, video):
    comment = _comment(db, video, visible=False)

    response = client.post(
        f"/api/videos/{video.id}/comments/{comment.id}/like", headers=alice
    )
    assert response.status_code == 404


# ==================== Views / Metadata ====================


def test_view_counts_once_per_ip(client, video):
    first = client.post(
        f"/api/videos/{video.id}/view", headers={"x-forwarded-for": "10.0.0.1"}
    )
    second = client.post(
        f"/api/videos/{video.id}/view", headers={"x-forwarded-for": "10.0.0.1"}
    )

    assert first.json() == {"success": True, "view_count": 1}
    assert second.status_code == 429
    assert second.json()["message"] == "Please wait 30 minutes before viewing again"


def test_view_from_another_ip_counts(client, video):
    client.post(f"/api/videos/{video.id}/view", headers={"x-forwarded-for": "10.0.0.1"})
    response = client.post(
        f"/api/videos/{video.id}/view",
        headers={"x-forwarded-for": "10.0.0.2, 172.16.0.1"},
    )

    assert response.json()["view_count"] == 2


def test_view_unknown_video_is_404(client):
    response = client.post("/api/videos/missing/view")
    assert response.status_code == 404


def test_metadata_sets_unknown_duration_once(client, db):
    video = Video(title="Fresh upload")
    db.add(video)
    db.commit()
    db.refresh(video)

    first = client.patch(f"/api/videos/{video.id}/metadata", json={"duration": 42.5})
    second = client.patch(f"/api/videos/{video.id}/metadata", json={"duration": 99})

    assert first.json()["success"] is True
    assert second.json()["success"] is True

    db.expire_all()
    assert db.query(Video).filter(Video.id == video.id).first().duration == 42.5


def test_metadata_rejects_negative_duration(client, video):
    response = client.patch(f"/api/videos/{video.id}/metadata", json={"duration": -1})
    assert response.status_code == 422
