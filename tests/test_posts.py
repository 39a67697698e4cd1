from datetime import datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError

from app.db.timestamps import utcnow
from app.modules.posts.comments.models.comment import Comment
from app.modules.posts.likes.models.like import Like
from app.modules.posts.models.post import Post
from app.modules.posts.services import post as post_service
from tests.conftest import auth_headers

POSTS_URL = "/api/v1/posts"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"0" * 64


def _add_like(db, post, user):
    db.add(Like(id=f"like-{post.id}-{user.id}", post_id=post.id, user_id=user.id))
    db.commit()


def _add_comment(db, post, user, content="nice", created_at=None):
    comment = Comment(
        id=f"comment-{post.id}-{user.id}-{content}",
        post_id=post.id,
        user_id=user.id,
        content=content,
        created_at=created_at or datetime(2026, 2, 1),
        updated_at=created_at or datetime(2026, 2, 1),
    )
    db.add(comment)
    db.commit()
    return comment


def test_list_posts_newest_first_with_pagination_meta(client, make_user, make_post):
    owner = make_user("alice")
    posts = [make_post(owner) for _ in range(25)]

    response = client.get(POSTS_URL, params={"limit": 10, "offset": 0})

    assert response.status_code == 200
    body = response.json()
    assert [item["id"] for item in body["data"]] == [p.id for p in reversed(posts)][:10]
    assert body["meta"] == {"total": 25, "limit": 10, "offset": 0, "hasMore": True}


def test_last_page_has_no_more(client, make_user, make_post):
    owner = make_user("alice")
    for _ in range(25):
        make_post(owner)

    response = client.get(POSTS_URL, params={"limit": 10, "offset": 20})

    body = response.json()
    assert len(body["data"]) == 5
    assert body["meta"]["hasMore"] is False


def test_default_limit_is_ten(client, make_user, make_post):
    owner = make_user("alice")
    for _ in range(12):
        make_post(owner)

    body = client.get(POSTS_URL).json()

    assert len(body["data"]) == 10
    assert body["meta"]["limit"] == 10


def test_list_posts_filters_by_owner_uid(client, make_user, make_post):
    alice = make_user("alice")
    bob = make_user("bob")
    alice_post = make_post(alice)
    make_post(bob)

    body = client.get(POSTS_URL, params={"userId": "alice"}).json()

    assert [item["id"] for item in body["data"]] == [alice_post.id]
    assert body["meta"]["total"] == 1


def test_unknown_owner_yields_empty_page(client, make_user, make_post):
    make_post(make_user("alice"))

    response = client.get(POSTS_URL, params={"userId": "nobody"})

    assert response.status_code == 200
    assert response.json()["data"] == []
    assert response.json()["meta"]["total"] == 0


def test_posts_carry_counts_owner_and_viewer_like_state(client, db_session, make_user, make_post):
    alice = make_user("alice", "Alice")
    bob = make_user("bob")
    liked = make_post(alice)
    other = make_post(alice)
    _add_like(db_session, liked, bob)
    _add_like(db_session, liked, alice)
    _add_comment(db_session, liked, bob)

    body = client.get(POSTS_URL, headers=auth_headers("bob")).json()
    by_id = {item["id"]: item for item in body["data"]}

    assert by_id[liked.id]["likes_count"] == 2
    assert by_id[liked.id]["comments_count"] == 1
    assert by_id[liked.id]["is_liked"] is True
    assert by_id[liked.id]["user"]["name"] == "Alice"
    assert by_id[other.id]["likes_count"] == 0
    assert by_id[other.id]["is_liked"] is False


def test_anonymous_viewer_never_sees_liked(client, db_session, make_user, make_post):
    alice = make_user("alice")
    post = make_post(alice)
    _add_like(db_session, post, alice)

    body = client.get(POSTS_URL).json()

    assert body["data"][0]["likes_count"] == 1
    assert body["data"][0]["is_liked"] is False


def test_same_timestamp_posts_order_deterministically(client, make_user, make_post):
    owner = make_user("alice")
    moment = datetime(2026, 3, 1)
    posts = [make_post(owner, created_at=moment) for _ in range(3)]

    first = client.get(POSTS_URL).json()["data"]
    second = client.get(POSTS_URL).json()["data"]

    assert [p["id"] for p in first] == [p["id"] for p in second]
    assert sorted(p.id for p in posts) == sorted(p["id"] for p in first)


def test_get_single_post(client, make_user, make_post):
    post = make_post(make_user("alice"), caption="hello")

    response = client.get(f"{POSTS_URL}/{post.id}")

    assert response.status_code == 200
    assert response.json()["data"]["caption"] == "hello"


def test_get_missing_post_returns_404(client):
    response = client.get(f"{POSTS_URL}/missing")

    assert response.status_code == 404
    assert response.json() == {"error": "Post not found"}


def test_limit_out_of_range_is_rejected(client):
    response = client.get(POSTS_URL, params={"limit": 0})

    assert response.status_code == 400
    assert "error" in response.json()


def test_create_post_uploads_then_persists(client, db_session, storage, make_user):
    alice = make_user("alice")

    response = client.post(
        POSTS_URL,
        files={"image": ("photo.PNG", PNG_BYTES, "image/png")},
        data={"caption": "  sunset  "},
        headers=auth_headers("alice"),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["post"]["caption"] == "sunset"
    assert body["post"]["user_id"] == alice.id

    [(action, key)] = storage.calls
    assert action == "upload"
    assert key.startswith("alice/") and key.endswith(".png")
    assert body["post"]["image_url"] == storage.get_public_url(key)
    assert storage.objects[key] == (PNG_BYTES, "image/png")
    assert db_session.query(Post).count() == 1


def test_blank_caption_is_stored_as_null(client, make_user):
    make_user("alice")

    response = client.post(
        POSTS_URL,
        files={"image": ("photo.jpg", PNG_BYTES, "image/jpeg")},
        data={"caption": "   "},
        headers=auth_headers("alice"),
    )

    assert response.status_code == 200
    assert response.json()["post"]["caption"] is None


def test_create_post_requires_authentication(client, storage):
    response = client.post(POSTS_URL, files={"image": ("photo.png", PNG_BYTES, "image/png")})

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}
    assert storage.calls == []


def test_create_post_requires_image(client, make_user):
    make_user("alice")

    response = client.post(POSTS_URL, data={"caption": "no image"}, headers=auth_headers("alice"))

    assert response.status_code == 400
    assert response.json() == {"error": "Please select an image file"}


def test_oversized_upload_is_rejected_before_storage(client, db_session, storage, make_user):
    make_user("alice")
    six_mb = b"0" * (6 * 1024 * 1024)

    response = client.post(
        POSTS_URL,
        files={"image": ("big.png", six_mb, "image/png")},
        headers=auth_headers("alice"),
    )

    assert response.status_code == 400
    assert response.json() == {"error": "File exceeds the 5MB limit (current: 6.00MB)"}
    assert storage.calls == []
    assert db_session.query(Post).count() == 0


def test_unsupported_image_type_is_rejected(client, storage, make_user):
    make_user("alice")

    response = client.post(
        POSTS_URL,
        files={"image": ("doc.pdf", b"%PDF-1.4", "application/pdf")},
        headers=auth_headers("alice"),
    )

    assert response.status_code == 400
    assert "Unsupported file type" in response.json()["error"]
    assert storage.calls == []


def test_caption_over_limit_creates_nothing(client, db_session, storage, make_user):
    make_user("alice")

    response = client.post(
        POSTS_URL,
        files={"image": ("photo.png", PNG_BYTES, "image/png")},
        data={"caption": "x" * 2201},
        headers=auth_headers("alice"),
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Caption may be at most 2200 characters"}
    assert storage.calls == []
    assert db_session.query(Post).count() == 0


def test_caption_at_limit_is_accepted(client, make_user):
    make_user("alice")

    response = client.post(
        POSTS_URL,
        files={"image": ("photo.png", PNG_BYTES, "image/png")},
        data={"caption": "x" * 2200},
        headers=auth_headers("alice"),
    )

    assert response.status_code == 200
    assert len(response.json()["post"]["caption"]) == 2200


def test_unsynced_caller_cannot_post(client, storage):
    response = client.post(
        POSTS_URL,
        files={"image": ("photo.png", PNG_BYTES, "image/png")},
        headers=auth_headers("ghost"),
    )

    assert response.status_code == 404
    assert response.json() == {"error": "User not found"}
    assert storage.calls == []


def test_failed_insert_removes_uploaded_image(client, db_session, storage, make_user, monkeypatch):
    make_user("alice")

    def failing_create_post(*args, **kwargs):
        raise SQLAlchemyError("insert failed")

    monkeypatch.setattr(post_service, "create_post", failing_create_post)

    response = client.post(
        POSTS_URL,
        files={"image": ("photo.png", PNG_BYTES, "image/png")},
        headers=auth_headers("alice"),
    )

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to create post"}
    assert [action for action, _ in storage.calls] == ["upload", "delete"]
    assert storage.objects == {}
    assert db_session.query(Post).count() == 0


def test_failed_cleanup_still_reports_insert_failure(client, storage, make_user, monkeypatch):
    make_user("alice")
    storage.fail_delete = True

    def failing_create_post(*args, **kwargs):
        raise SQLAlchemyError("insert failed")

    monkeypatch.setattr(post_service, "create_post", failing_create_post)

    response = client.post(
        POSTS_URL,
        files={"image": ("photo.png", PNG_BYTES, "image/png")},
        headers=auth_headers("alice"),
    )

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to create post"}


def test_storage_failure_creates_no_post(client, db_session, storage, make_user):
    make_user("alice")
    storage.fail_upload = True

    response = client.post(
        POSTS_URL,
        files={"image": ("photo.png", PNG_BYTES, "image/png")},
        headers=auth_headers("alice"),
    )

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to upload image"}
    assert db_session.query(Post).count() == 0


def test_owner_deletes_post_with_likes_comments_and_image(client, db_session, storage, make_user, make_post):
    alice = make_user("alice")
    bob = make_user("bob")
    post = make_post(alice)
    key = storage.key_from_url(post.image_url)
    storage.objects[key] = (PNG_BYTES, "image/png")
    _add_like(db_session, post, bob)
    _add_comment(db_session, post, bob)

    response = client.delete(f"{POSTS_URL}/{post.id}", headers=auth_headers("alice"))

    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert db_session.query(Post).count() == 0
    assert db_session.query(Like).count() == 0
    assert db_session.query(Comment).count() == 0
    assert ("delete", key) in storage.calls


def test_non_owner_cannot_delete_post(client, db_session, make_user, make_post):
    alice = make_user("alice")
    make_user("bob")
    post = make_post(alice)

    response = client.delete(f"{POSTS_URL}/{post.id}", headers=auth_headers("bob"))

    assert response.status_code == 403
    assert db_session.query(Post).count() == 1


def test_delete_missing_post_returns_404(client, make_user):
    make_user("alice")

    response = client.delete(f"{POSTS_URL}/missing", headers=auth_headers("alice"))

    assert response.status_code == 404


def test_created_post_appears_first_in_feed(client, make_user, make_post):
    alice = make_user("alice")
    make_post(alice, created_at=utcnow() - timedelta(days=1))

    created = client.post(
        POSTS_URL,
        files={"image": ("photo.png", PNG_BYTES, "image/png")},
        headers=auth_headers("alice"),
    ).json()["post"]

    feed = client.get(POSTS_URL).json()["data"]
    assert feed[0]["id"] == created["id"]
