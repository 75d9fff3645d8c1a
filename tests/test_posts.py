import pytest

from snuggle.blog import DataUnavailableError, PostService, PostAccessError, PrivatePostError

# --- Service Unit Tests ---

def test_list_feed_newest_public_first(fake_supabase):
    feed = PostService(fake_supabase).list_feed()

    assert [post["id"] for post in feed] == ["p5", "p4", "p2", "p1"]
    assert feed[0]["blogs"] == {"name": "Bob Writes", "profiles": {"nickname": "bob", "profile_image_url": None}}
    assert feed[1]["blogs"]["profiles"]["profile_image_url"] == "https://img/alice.png"
    assert feed[2]["thumbnail_url"] == "https://img/p2.png"
    assert feed[0]["formatted_date"] == "2026년 1월 5일"

def test_list_feed_limit_and_missing_blog(fake_supabase):
    fake_supabase.tables["blogs"] = [b for b in fake_supabase.tables["blogs"] if b["id"] != "blog-2"]

    feed = PostService(fake_supabase).list_feed(limit=2)

    assert [post["id"] for post in feed] == ["p5", "p4"]
    assert feed[0]["blogs"] is None

def test_list_feed_error_returns_empty(fake_supabase):
    fake_supabase.failing_tables.add("posts")
    assert PostService(fake_supabase).list_feed() == []

def test_get_post_details(fake_supabase):
    post = PostService(fake_supabase).get_post("p2", viewer_id="user-bob")

    assert post["title"] == "Second"
    assert post["blog"]["name"] == "Alice Log"
    assert post["profile"] == {"nickname": "alice", "profile_image_url": "https://img/alice.png"}
    assert sorted(c["name"] for c in post["categories"]) == ["Diary", "Python"]
    assert post["like_count"] == 2
    assert post["is_liked"] is True
    # p3 is private, so the next post skips to p4
    assert post["prev_post"] == {"id": "p1", "title": "First"}
    assert post["next_post"] == {"id": "p4", "title": "Third"}

def test_get_post_edges_of_blog(fake_supabase):
    service = PostService(fake_supabase)

    first = service.get_post("p1")
    assert first["prev_post"] is None
    assert first["next_post"] == {"id": "p2", "title": "Second"}
    assert first["is_liked"] is False
    assert first["categories"] == []

    last = service.get_post("p4")
    assert last["next_post"] is None

def test_get_post_missing(fake_supabase):
    assert PostService(fake_supabase).get_post("nope") is None

def test_get_private_post(fake_supabase):
    service = PostService(fake_supabase)

    with pytest.raises(PrivatePostError, match="Private"):
        service.get_post("p3")
    with pytest.raises(PrivatePostError):
        service.get_post("p3", viewer_id="user-bob")

    assert service.get_post("p3", viewer_id="user-alice")["title"] == "Secret"

def test_post_lookup_failure_is_not_missing(fake_supabase):
    fake_supabase.failing_tables.add("posts")
    service = PostService(fake_supabase)

    with pytest.raises(DataUnavailableError):
        service.get_post("p1")
    with pytest.raises(DataUnavailableError):
        service.increment_view_count("p1")
    with pytest.raises(DataUnavailableError):
        service.delete_post("p1", "user-alice")

def test_get_post_detail_failure_keeps_post(fake_supabase):
    fake_supabase.failing_tables.add("likes")

    post = PostService(fake_supabase).get_post("p2")

    assert post["title"] == "Second"
    assert post["like_count"] == 0

def test_increment_view_count(fake_supabase):
    service = PostService(fake_supabase)

    assert service.increment_view_count("p1") == 4
    assert service.increment_view_count("p1") == 5
    assert service.increment_view_count("nope") is None

def test_update_post_only_editable_fields(fake_supabase):
    service = PostService(fake_supabase)

    updated = service.update_post("p1", "user-alice", {"title": "First!", "view_count": 999, "is_private": True})

    assert updated["title"] == "First!"
    assert updated["is_private"] is True
    assert updated["view_count"] == 3

def test_update_post_rules(fake_supabase):
    service = PostService(fake_supabase)

    with pytest.raises(ValueError):
        service.update_post("p1", "user-alice", {"view_count": 1})
    with pytest.raises(PostAccessError):
        service.update_post("p1", "user-bob", {"title": "hijack"})
    assert service.update_post("nope", "user-alice", {"title": "x"}) is None

def test_delete_post(fake_supabase):
    service = PostService(fake_supabase)

    with pytest.raises(PostAccessError):
        service.delete_post("p1", "user-bob")
    assert service.delete_post("p1", "user-alice") is True
    assert service.delete_post("p1", "user-alice") is None

# --- API Integration Tests ---

def test_feed_endpoint(api_client):
    response = api_client.get("/api/posts", params={"limit": 3})
    assert response.status_code == 200
    assert [post["id"] for post in response.json()["posts"]] == ["p5", "p4", "p2"]

def test_post_endpoint(api_client, alice_headers):
    assert api_client.get("/api/posts/p2").json()["next_post"]["id"] == "p4"
    assert api_client.get("/api/posts/nope").status_code == 404

    private = api_client.get("/api/posts/p3")
    assert private.status_code == 403
    assert private.json()["detail"] == "Private"

    assert api_client.get("/api/posts/p3", headers=alice_headers).status_code == 200

def test_post_endpoint_invalid_token_is_anonymous(api_client):
    response = api_client.get("/api/posts/p2", headers={"Authorization": "Bearer expired"})
    assert response.status_code == 200
    assert response.json()["is_liked"] is False

def test_view_endpoint(api_client):
    assert api_client.post("/api/posts/p5/view").json() == {"view_count": 11}
    assert api_client.post("/api/posts/nope/view").status_code == 404

def test_update_endpoint(api_client, alice_headers, bob_headers):
    response = api_client.patch("/api/posts/p1", headers=alice_headers, json={"is_private": True})
    assert response.status_code == 200
    assert response.json()["is_private"] is True

    assert api_client.patch("/api/posts/p1", headers=bob_headers, json={"title": "x"}).status_code == 403
    assert api_client.patch("/api/posts/p1", headers=alice_headers, json={}).status_code == 400
    assert api_client.patch("/api/posts/p1", json={"title": "x"}).status_code == 401

def test_delete_endpoint(api_client, alice_headers, bob_headers):
    assert api_client.delete("/api/posts/p1", headers=bob_headers).status_code == 403
    assert api_client.delete("/api/posts/p1", headers=alice_headers).json() == {"message": "Post deleted"}
    assert api_client.delete("/api/posts/p1", headers=alice_headers).status_code == 404

def test_toggle_like(fake_supabase):
    service = PostService(fake_supabase)

    assert service.toggle_like("p2", "user-bob") == {"is_liked": False, "like_count": 1}
    assert service.toggle_like("p2", "user-bob") == {"is_liked": True, "like_count": 2}
    assert service.toggle_like("p1", "user-alice") == {"is_liked": True, "like_count": 1}
    assert service.toggle_like("nope", "user-alice") is None

    with pytest.raises(PrivatePostError):
        service.toggle_like("p3", "user-bob")

def test_like_endpoint(api_client, alice_headers, bob_headers):
    response = api_client.post("/api/posts/p2/like", headers=alice_headers)
    assert response.json() == {"is_liked": True, "like_count": 3}
    assert api_client.get("/api/posts/p2", headers=alice_headers).json()["is_liked"] is True

    assert api_client.post("/api/posts/p3/like", headers=bob_headers).status_code == 403
    assert api_client.post("/api/posts/nope/like", headers=alice_headers).status_code == 404
    assert api_client.post("/api/posts/p2/like").status_code == 401

def test_post_endpoints_report_outage(api_client, fake_supabase, alice_headers):
    fake_supabase.failing_tables.add("posts")

    response = api_client.get("/api/posts/p1")
    assert response.status_code == 503
    assert response.json()["detail"] == "Failed to load post"

    assert api_client.post("/api/posts/p1/view").status_code == 503
    assert api_client.patch("/api/posts/p1", headers=alice_headers, json={"title": "x"}).status_code == 503
    assert api_client.delete("/api/posts/p1", headers=alice_headers).status_code == 503

def test_update_write_failure_reports_outage(api_client, fake_supabase, alice_headers):
    fake_supabase.failing_actions.add("update")

    response = api_client.patch("/api/posts/p1", headers=alice_headers, json={"title": "x"})
    assert response.status_code == 503
    assert response.json()["detail"] == "Failed to update post"
