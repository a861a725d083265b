"""
Tests for response projections using in-memory objects
"""

from datetime import datetime, timezone
from types import SimpleNamespace
from uuid import uuid4

from vtube.models import FollowStatusEnum
from vtube.services.projections import (
    owner_summary,
    comment_preview,
    video_card,
    video_detail,
    viewer_state,
    history_item,
    follow_edge,
    page_meta,
    group_comments,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def fake_user(username="alice"):
    return SimpleNamespace(
        id=uuid4(),
        username=username,
        full_name=username.capitalize(),
        avatar_url=f"https://cdn.test/{username}.png",
        email=f"{username}@example.com",
    )


def fake_video(owner, views=3):
    return SimpleNamespace(
        id=uuid4(),
        title="Tigers at dusk",
        description="Filmed in the reserve",
        thumbnail_url="https://cdn.test/t.jpg",
        thumbnail_kind="image",
        file_url="https://cdn.test/v.mp4",
        file_kind="video",
        duration=61,
        views=views,
        owner_id=owner.id,
        created_at=NOW,
        updated_at=NOW,
    )


def fake_comment(video, author, content="Great shot"):
    return SimpleNamespace(
        id=uuid4(),
        video_id=video.id,
        user_id=author.id,
        content=content,
        is_edited=False,
        created_at=NOW,
        updated_at=NOW,
    )


class TestProjections:
    """Test projection shapes"""

    def test_owner_summary_is_minimal(self):
        user = fake_user()

        summary = owner_summary(user)

        assert summary == {
            "id": user.id,
            "username": "alice",
            "fullName": "Alice",
            "avatar": "https://cdn.test/alice.png",
        }
        assert "email" not in summary

    def test_owner_summary_none(self):
        assert owner_summary(None) is None

    def test_video_card(self):
        owner = fake_user()
        video = fake_video(owner)

        card = video_card(video, owner, likes=2, dislikes=1, comment_count=4)

        assert card["thumbnail"] == {"url": "https://cdn.test/t.jpg", "type": "image"}
        assert card["videoFile"] == {"url": "https://cdn.test/v.mp4", "type": "video"}
        assert (card["likes"], card["dislikes"], card["commentCount"]) == (2, 1, 4)
        assert card["owner"]["username"] == "alice"
        assert card["comments"] == []
        assert "isOwner" not in card

    def test_video_card_owner_flag(self):
        owner = fake_user()
        video = fake_video(owner)

        assert video_card(video, owner, viewer_id=owner.id)["isOwner"] is True
        assert video_card(video, owner, viewer_id=uuid4())["isOwner"] is False

    def test_comment_preview(self):
        owner = fake_user()
        author = fake_user("bob")
        comment = fake_comment(fake_video(owner), author)

        preview = comment_preview(comment, author)

        assert preview["content"] == "Great shot"
        assert preview["isEdited"] is False
        assert preview["user"]["username"] == "bob"

    def test_viewer_state_anonymous(self):
        state = viewer_state(None, uuid4(), vote=1, is_following_owner=True, has_watched=True)

        assert not any(state.values())

    def test_viewer_state_for_caller(self):
        viewer = uuid4()

        state = viewer_state(viewer, uuid4(), vote=-1, is_following_owner=True, has_watched=False)

        assert state == {
            "isLiked": False,
            "isDisliked": True,
            "isFollowingOwner": True,
            "hasWatched": False,
            "isOwner": False,
        }

    def test_video_detail(self):
        owner = fake_user()
        video = fake_video(owner, views=10)
        state = viewer_state(owner.id, owner.id)

        detail = video_detail(video, owner, 5, 0, 1, [], state, owner_followers=7)

        assert detail["views"] == 10
        assert detail["owner"]["followers"] == 7
        assert detail["viewer"]["isOwner"] is True
        assert detail["updatedAt"] == NOW

    def test_history_item(self):
        owner = fake_user()
        video = fake_video(owner)
        entry = SimpleNamespace(id=uuid4(), video_id=video.id, created_at=NOW)

        item = history_item(entry, video, owner)

        assert item["watchedAt"] == NOW
        assert item["video"] == {
            "id": video.id,
            "title": video.title,
            "description": video.description,
            "thumbnailUrl": video.thumbnail_url,
            "owner": owner_summary(owner),
        }

    def test_follow_edge_status_value(self):
        edge = SimpleNamespace(
            id=uuid4(),
            follower_id=uuid4(),
            following_id=uuid4(),
            status=FollowStatusEnum.BLOCKED,
            notifications_enabled=True,
            followed_at=NOW,
            updated_at=NOW,
        )

        assert follow_edge(edge)["status"] == "blocked"

    def test_page_meta(self):
        assert page_meta(21, 2, 10) == {"totalVideos": 21, "totalPages": 3, "page": 2, "limit": 10}
        assert page_meta(0, 1, 10)["totalPages"] == 0

    def test_group_comments_caps_per_video(self):
        owner = fake_user()
        author = fake_user("bob")
        first, second = fake_video(owner), fake_video(owner)
        rows = [(fake_comment(first, author, f"c{i}"), author) for i in range(4)]
        rows.append((fake_comment(second, author, "other"), author))

        grouped = group_comments(rows, per_video=3)

        assert [c["content"] for c in grouped[first.id]] == ["c0", "c1", "c2"]
        assert len(grouped[second.id]) == 1
