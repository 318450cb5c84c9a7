"""Tests for the interactions HTTP API."""

from fastapi.testclient import TestClient


BASE = "/v1/interactions"


def post_comment(client, headers, content, parent_id="blog-42", reply_to_id=None):
    body = {"content": content}
    if reply_to_id:
        body["reply_to_id"] = reply_to_id
    return client.post(f"{BASE}/{parent_id}/comments", json=body, headers=headers)


class TestCommentEndpoints:
    """Tests for comment routes."""

    def test_empty_thread(self, client: TestClient) -> None:
        response = client.get(f"{BASE}/blog-42/comments")

        assert response.status_code == 200
        assert response.json() == {
            "parent_id": "blog-42",
            "total": 0,
            "max_display_depth": 2,
            "items": [],
        }

    def test_post_and_reply(self, client: TestClient, auth_headers) -> None:
        alice = auth_headers("alice", "Alice")
        bob = auth_headers("bob", "Bob")

        created = post_comment(client, alice, "  Great talk!  ")
        assert created.status_code == 201
        root = created.json()
        assert root["content"] == "Great talk!"
        assert root["author_name"] == "Alice"
        assert root["reply_to_id"] is None

        reply = post_comment(client, bob, "Agreed", reply_to_id=root["comment_id"])
        assert reply.status_code == 201

        thread = client.get(f"{BASE}/blog-42/comments").json()
        assert thread["total"] == 2
        rows = [(i["content"], i["depth"], i["reply_count"]) for i in thread["items"]]
        assert rows == [
            ("Great talk!", 0, 1),
            ("Agreed", 1, 0),
        ]

    def test_indent_is_capped(self, client: TestClient, auth_headers) -> None:
        headers = auth_headers("alice")
        reply_to = None
        for n in range(4):
            reply_to = post_comment(
                client, headers, f"level {n}", reply_to_id=reply_to
            ).json()["comment_id"]

        items = client.get(f"{BASE}/blog-42/comments").json()["items"]

        assert [i["depth"] for i in items] == [0, 1, 2, 3]
        assert [i["indent"] for i in items] == [0, 1, 2, 2]

    def test_anonymous_post_is_unauthorized(self, client: TestClient) -> None:
        response = post_comment(client, {}, "hello")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert client.get(f"{BASE}/blog-42/comments").json()["total"] == 0

    def test_invalid_token_is_treated_as_anonymous(self, client: TestClient) -> None:
        response = post_comment(client, {"Authorization": "Bearer not-a-jwt"}, "hi")
        assert response.status_code == 401

    def test_blank_content_is_bad_request(
        self, client: TestClient, auth_headers
    ) -> None:
        response = post_comment(client, auth_headers("alice"), " \n\t ")

        assert response.status_code == 400
        assert response.json()["error"] is True

    def test_missing_content_is_validation_error(
        self, client: TestClient, auth_headers
    ) -> None:
        response = client.post(
            f"{BASE}/blog-42/comments", json={}, headers=auth_headers("alice")
        )
        assert response.status_code == 422

    def test_reply_to_unknown_comment_is_bad_request(
        self, client: TestClient, auth_headers
    ) -> None:
        response = post_comment(
            client, auth_headers("bob"), "Agreed", reply_to_id="ghost"
        )
        assert response.status_code == 400

    def test_delete_by_author_leaves_orphan(
        self, client: TestClient, auth_headers
    ) -> None:
        alice = auth_headers("alice")
        root = post_comment(client, alice, "Great talk!").json()
        post_comment(
            client, auth_headers("bob"), "Agreed", reply_to_id=root["comment_id"]
        )

        response = client.delete(
            f"{BASE}/comments/{root['comment_id']}", headers=alice
        )

        assert response.status_code == 200
        items = client.get(f"{BASE}/blog-42/comments").json()["items"]
        assert len(items) == 1
        assert items[0]["content"] == "Agreed"
        assert items[0]["is_orphan"] is True
        assert items[0]["depth"] == 0

    def test_delete_by_other_member_is_forbidden(
        self, client: TestClient, auth_headers
    ) -> None:
        root = post_comment(client, auth_headers("alice"), "Great talk!").json()

        response = client.delete(
            f"{BASE}/comments/{root['comment_id']}", headers=auth_headers("bob")
        )

        assert response.status_code == 403

    def test_delete_by_admin(self, client: TestClient, auth_headers) -> None:
        root = post_comment(client, auth_headers("alice"), "Great talk!").json()

        response = client.delete(
            f"{BASE}/comments/{root['comment_id']}",
            headers=auth_headers("root", role="administrator"),
        )

        assert response.status_code == 200

    def test_delete_missing_is_not_found(
        self, client: TestClient, auth_headers
    ) -> None:
        response = client.delete(f"{BASE}/comments/ghost", headers=auth_headers("a"))
        assert response.status_code == 404


class TestReactionEndpoints:
    """Tests for reaction routes."""

    def test_toggle_returns_fresh_summary(
        self, client: TestClient, auth_headers
    ) -> None:
        carol = auth_headers("C")

        first = client.post(
            f"{BASE}/blog-42/reactions", json={"type": "like"}, headers=carol
        )
        assert first.status_code == 200
        assert first.json() == {
            "parent_id": "blog-42",
            "like_count": 1,
            "dislike_count": 0,
            "current_user_reaction": "like",
        }

        second = client.post(
            f"{BASE}/blog-42/reactions", json={"type": "dislike"}, headers=carol
        )
        assert second.json()["like_count"] == 0
        assert second.json()["dislike_count"] == 1
        assert second.json()["current_user_reaction"] == "dislike"

        third = client.post(
            f"{BASE}/blog-42/reactions", json={"type": "dislike"}, headers=carol
        )
        assert third.json()["dislike_count"] == 0
        assert third.json()["current_user_reaction"] is None

    def test_summary_for_anonymous_and_signed_in(
        self, client: TestClient, auth_headers
    ) -> None:
        client.post(
            f"{BASE}/blog-42/reactions",
            json={"type": "like"},
            headers=auth_headers("C"),
        )

        anonymous = client.get(f"{BASE}/blog-42/reactions").json()
        mine = client.get(f"{BASE}/blog-42/reactions", headers=auth_headers("C")).json()

        assert anonymous["like_count"] == 1
        assert anonymous["current_user_reaction"] is None
        assert mine["current_user_reaction"] == "like"

    def test_anonymous_toggle_is_unauthorized(self, client: TestClient) -> None:
        response = client.post(f"{BASE}/blog-42/reactions", json={"type": "like"})
        assert response.status_code == 401

    def test_unknown_type_is_validation_error(
        self, client: TestClient, auth_headers
    ) -> None:
        response = client.post(
            f"{BASE}/blog-42/reactions",
            json={"type": "love"},
            headers=auth_headers("C"),
        )
        assert response.status_code == 422


class TestModerationEndpoints:
    """Tests for purge and analytics routes."""

    def test_purge_requires_privileged_role(
        self, client: TestClient, auth_headers
    ) -> None:
        post_comment(client, auth_headers("alice"), "Great talk!")

        assert client.delete(f"{BASE}/blog-42").status_code == 401
        member = client.delete(f"{BASE}/blog-42", headers=auth_headers("alice"))
        assert member.status_code == 403

        response = client.delete(
            f"{BASE}/blog-42", headers=auth_headers("root", role="Admin")
        )
        assert response.status_code == 200
        assert response.json() == {
            "parent_id": "blog-42",
            "comments_deleted": 1,
            "reactions_deleted": 0,
        }
        assert client.get(f"{BASE}/blog-42/comments").json()["total"] == 0

    def test_engagement_report(self, client: TestClient, auth_headers) -> None:
        post_comment(client, auth_headers("alice"), "one")
        client.post(
            f"{BASE}/blog-7/reactions",
            json={"type": "like"},
            headers=auth_headers("bob"),
        )

        response = client.get(
            f"{BASE}/analytics/engagement",
            params={"days": 3, "top": 5},
            headers=auth_headers("root", role="Admin"),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["days"] == 3
        assert data["totals"] == {"comments": 1, "reactions": 1, "content_items": 2}
        assert len(data["daily"]) == 3
        assert {c["parent_id"] for c in data["top_content"]} == {"blog-42", "blog-7"}

    def test_engagement_report_forbidden_for_members(
        self, client: TestClient, auth_headers
    ) -> None:
        response = client.get(
            f"{BASE}/analytics/engagement", headers=auth_headers("alice")
        )
        assert response.status_code == 403

    def test_engagement_report_rejects_bad_window(
        self, client: TestClient, auth_headers
    ) -> None:
        response = client.get(
            f"{BASE}/analytics/engagement",
            params={"days": 0},
            headers=auth_headers("root", role="Admin"),
        )
        assert response.status_code == 422
