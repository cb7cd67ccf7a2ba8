"""HTTP-level tests for the REST surface."""

from __future__ import annotations

import unittest
from unittest import mock

from fastapi.testclient import TestClient
from sqlalchemy import select

from echo_social.config import Settings
from echo_social.main import create_app
from echo_social.models.poll import Poll
from echo_social.models.poll_option import PollOption
from echo_social.models.post import Post


class ApiRouteTests(unittest.TestCase):
    def setUp(self) -> None:
        self.app = create_app(Settings(database_url="sqlite+pysqlite:///:memory:", _env_file=None))
        self.client = TestClient(self.app)
        self.client.__enter__()
        self.alice = self._register("alice", "Alice")
        self.bob = self._register("bob", "Bob")

    def tearDown(self) -> None:
        self.client.__exit__(None, None, None)

    def _register(self, username: str, display_name: str) -> dict:
        response = self.client.post(
            "/api/auth/register",
            json={"username": username, "password": "secret", "displayName": display_name},
        )
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()["user"]

    def _notifications(self, user_id: int) -> list[dict]:
        response = self.client.get(f"/api/users/{user_id}/notifications")
        self.assertEqual(response.status_code, 200)
        return response.json()

    def _post(self, user_id: int, content: str = "hello") -> dict:
        response = self.client.post("/api/posts", json={"userId": user_id, "content": content})
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()

    def test_register_hides_password_and_rejects_duplicate_username(self) -> None:
        self.assertNotIn("password", self.alice)
        self.assertEqual(self.alice["displayName"], "Alice")

        response = self.client.post(
            "/api/auth/register",
            json={"username": "alice", "password": "x", "displayName": "Other"},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"message": "Username already exists"})

    def test_login_checks_credentials(self) -> None:
        ok = self.client.post("/api/auth/login", json={"username": "alice", "password": "secret"})
        bad = self.client.post("/api/auth/login", json={"username": "alice", "password": "nope"})

        self.assertEqual(ok.status_code, 200)
        self.assertTrue(ok.json()["token"])
        self.assertEqual(bad.status_code, 401)
        self.assertEqual(bad.json()["message"], "Invalid username or password")

    def test_duplicate_like_returns_400_without_second_notification(self) -> None:
        post = self._post(self.alice["id"])
        body = {"userId": self.bob["id"], "postId": post["id"]}

        first = self.client.post("/api/likes", json=body)
        second = self.client.post("/api/likes", json=body)

        self.assertEqual(first.status_code, 201)
        self.assertEqual(second.status_code, 400)
        self.assertEqual(second.json()["message"], "User already liked this post")
        self.assertEqual(len(self.client.get(f"/api/posts/{post['id']}/likes").json()), 1)
        notifications = self._notifications(self.alice["id"])
        self.assertEqual([(n["type"], n["referenceId"]) for n in notifications], [("like", post["id"])])

    def test_validation_errors_map_to_400_with_message(self) -> None:
        response = self.client.post("/api/messages", json={"conversationId": 1, "senderId": 1, "content": ""})
        self.assertEqual(response.status_code, 400)
        self.assertIn("message", response.json())

        response = self.client.get("/api/users/not-a-number")
        self.assertEqual(response.status_code, 400)

    def test_not_found_maps_to_404(self) -> None:
        self.assertEqual(self.client.get("/api/users/999").status_code, 404)
        self.assertEqual(self.client.get("/api/users/999").json(), {"message": "User not found"})
        self.assertEqual(self.client.patch("/api/notifications/999/read").status_code, 404)
        response = self.client.post("/api/likes", json={"userId": self.bob["id"], "postId": 999})
        self.assertEqual(response.status_code, 404)

    def test_out_of_range_ids_are_validation_errors(self) -> None:
        too_big = 2**70

        response = self.client.get(f"/api/conversations/{too_big}/messages")
        self.assertEqual(response.status_code, 400)
        self.assertIn("message", response.json())

        response = self.client.post("/api/likes", json={"userId": self.bob["id"], "postId": too_big})
        self.assertEqual(response.status_code, 400)

        response = self.client.post("/api/conversations", json={"participantIds": [self.alice["id"], too_big]})
        self.assertEqual(response.status_code, 400)

        self.assertEqual(self.client.get(f"/api/users/{2**63 - 1}").status_code, 404)

    def test_rest_send_persists_and_notifies_other_participants(self) -> None:
        conversation = self.client.post(
            "/api/conversations",
            json={"participantIds": [self.alice["id"], self.bob["id"]]},
        ).json()

        response = self.client.post(
            "/api/messages",
            json={"conversationId": conversation["id"], "senderId": self.alice["id"], "content": "  hi bob "},
        )

        self.assertEqual(response.status_code, 201, response.text)
        message = response.json()
        self.assertEqual(message["content"], "hi bob")
        self.assertEqual(message["senderId"], self.alice["id"])
        bob_notifications = self._notifications(self.bob["id"])
        self.assertEqual([(n["type"], n["referenceId"]) for n in bob_notifications], [("message", message["id"])])
        self.assertEqual(self._notifications(self.alice["id"]), [])

    def test_messages_listed_oldest_first(self) -> None:
        conversation = self.client.post(
            "/api/conversations",
            json={"participantIds": [self.alice["id"], self.bob["id"]]},
        ).json()
        for sender, text in ((self.alice, "first"), (self.bob, "second"), (self.alice, "third")):
            self.client.post(
                "/api/messages",
                json={"conversationId": conversation["id"], "senderId": sender["id"], "content": text},
            )

        history = self.client.get(f"/api/conversations/{conversation['id']}/messages").json()
        self.assertEqual([m["content"] for m in history], ["first", "second", "third"])

    def test_non_participant_cannot_send(self) -> None:
        conversation = self.client.post("/api/conversations", json={"participantIds": [self.alice["id"]]}).json()

        response = self.client.post(
            "/api/messages",
            json={"conversationId": conversation["id"], "senderId": self.bob["id"], "content": "hey"},
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.client.get(f"/api/conversations/{conversation['id']}/messages").json(), [])

    def test_duplicate_participant_is_rejected(self) -> None:
        conversation = self.client.post("/api/conversations", json={"name": "pair"}).json()
        body = {"conversationId": conversation["id"], "userId": self.bob["id"]}

        self.assertEqual(self.client.post("/api/conversation-participants", json=body).status_code, 201)
        self.assertEqual(self.client.post("/api/conversation-participants", json=body).status_code, 400)
        self.assertEqual(len(self.client.get(f"/api/conversations/{conversation['id']}/participants").json()), 1)
        self.assertEqual(
            [c["id"] for c in self.client.get(f"/api/users/{self.bob['id']}/conversations").json()],
            [conversation["id"]],
        )

    def test_notification_read_endpoints(self) -> None:
        self.client.post("/api/follows", json={"followerId": self.bob["id"], "followingId": self.alice["id"]})
        post = self._post(self.alice["id"])
        self.client.post("/api/comments", json={"postId": post["id"], "userId": self.bob["id"], "content": "nice"})

        notifications = self._notifications(self.alice["id"])
        self.assertEqual([n["type"] for n in notifications], ["comment", "follow"])
        self.assertEqual(self.client.get(f"/api/users/{self.alice['id']}/notifications/unread-count").json(), {"count": 2})

        marked = self.client.patch(f"/api/notifications/{notifications[0]['id']}/read")
        self.assertTrue(marked.json()["read"])

        response = self.client.post(f"/api/users/{self.alice['id']}/notifications/read-all")
        self.assertEqual(response.json(), {"message": "All notifications marked as read"})
        self.assertTrue(all(n["read"] for n in self._notifications(self.alice["id"])))

    def test_post_with_poll_is_created_atomically(self) -> None:
        response = self.client.post(
            "/api/posts",
            json={
                "userId": self.alice["id"],
                "content": "Lunch?",
                "poll": {"question": "Where?", "endsAt": "2030-01-01T00:00:00Z", "options": ["Tacos", "Ramen"]},
            },
        )
        self.assertEqual(response.status_code, 201, response.text)
        body = response.json()
        self.assertEqual([o["text"] for o in body["poll"]["options"]], ["Tacos", "Ramen"])

        too_few = self.client.post(
            "/api/posts",
            json={
                "userId": self.alice["id"],
                "content": "Bad poll",
                "poll": {"question": "?", "endsAt": "2030-01-01T00:00:00Z", "options": ["Only"]},
            },
        )
        self.assertEqual(too_few.status_code, 400)
        self.assertEqual(len(self.client.get("/api/posts").json()), 1)

    def test_failed_poll_step_rolls_back_post(self) -> None:
        with mock.patch("echo_social.services.posts.PollOption", side_effect=RuntimeError("boom")):
            with self.assertRaises(RuntimeError):
                self.client.post(
                    "/api/posts",
                    json={
                        "userId": self.alice["id"],
                        "content": "Half a poll",
                        "poll": {"question": "?", "endsAt": "2030-01-01T00:00:00Z", "options": ["A", "B"]},
                    },
                )

        with self.app.state.context.session_factory() as db:
            self.assertEqual(list(db.scalars(select(Post))), [])
            self.assertEqual(list(db.scalars(select(Poll))), [])
            self.assertEqual(list(db.scalars(select(PollOption))), [])

    def test_poll_vote_replaces_previous_vote(self) -> None:
        post = self.client.post(
            "/api/posts",
            json={
                "userId": self.alice["id"],
                "poll": {"question": "Pick", "endsAt": "2030-01-01T00:00:00Z", "options": ["A", "B"]},
            },
        ).json()
        poll = post["poll"]
        option_a, option_b = (o["id"] for o in poll["options"])

        self.client.post("/api/polls/vote", json={"pollId": poll["id"], "optionId": option_a, "userId": self.bob["id"]})
        self.client.post("/api/polls/vote", json={"pollId": poll["id"], "optionId": option_b, "userId": self.bob["id"]})

        votes = self.client.get(f"/api/polls/{poll['id']}/votes").json()
        self.assertEqual([(v["userId"], v["optionId"]) for v in votes], [(self.bob["id"], option_b)])

    def test_update_commands_reject_server_owned_fields(self) -> None:
        response = self.client.patch(f"/api/users/{self.alice['id']}", json={"id": 99, "bio": "hi"})
        self.assertEqual(response.status_code, 400)

        response = self.client.patch(f"/api/users/{self.alice['id']}", json={"bio": "hi"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["bio"], "hi")
        self.assertEqual(response.json()["id"], self.alice["id"])

        self.assertEqual(self.client.patch(f"/api/users/{self.alice['id']}", json={}).status_code, 400)

    def test_echo_link_flow(self) -> None:
        created = self.client.post(
            "/api/echo-links",
            json={"userId": self.alice["id"], "linkId": "ask-alice", "welcomeMessage": "Ask me anything"},
        )
        self.assertEqual(created.status_code, 201, created.text)
        link = created.json()

        again = self.client.post("/api/echo-links", json={"userId": self.alice["id"]})
        self.assertEqual(again.status_code, 400)
        self.assertEqual(again.json()["message"], "User already has an Echo Link")

        self.assertEqual(self.client.get("/api/echo-links/ask-alice").json()["id"], link["id"])
        self.assertEqual(self.client.get(f"/api/users/{self.alice['id']}/echo-link").json()["linkId"], "ask-alice")

        sent = self.client.post("/api/anonymous-messages", json={"echoLinkId": link["id"], "content": "Favourite film?"})
        self.assertEqual(sent.status_code, 201)
        notifications = self._notifications(self.alice["id"])
        self.assertEqual([(n["type"], n["referenceId"]) for n in notifications], [("anonymous_message", sent.json()["id"])])

        answered = self.client.patch(f"/api/anonymous-messages/{sent.json()['id']}", json={"answered": True})
        self.assertTrue(answered.json()["answered"])

        self.client.patch(f"/api/echo-links/{link['id']}", json={"active": False})
        closed = self.client.post("/api/anonymous-messages", json={"echoLinkId": link["id"], "content": "hello?"})
        self.assertEqual(closed.status_code, 400)

    def test_feed_and_follow_routes(self) -> None:
        own = self._post(self.alice["id"], "mine")
        followed = self._post(self.bob["id"], "bob's")
        self.client.post("/api/follows", json={"followerId": self.alice["id"], "followingId": self.bob["id"]})

        feed_ids = {p["id"] for p in self.client.get(f"/api/posts/feed/{self.alice['id']}").json()}
        self.assertEqual(feed_ids, {own["id"], followed["id"]})
        followers = self.client.get(f"/api/users/{self.bob['id']}/followers").json()
        self.assertEqual([u["username"] for u in followers], ["alice"])
        self.assertNotIn("password", followers[0])

        duplicate = self.client.post("/api/follows", json={"followerId": self.alice["id"], "followingId": self.bob["id"]})
        self.assertEqual(duplicate.status_code, 400)
        self.assertEqual(duplicate.json()["message"], "Already following this user")


if __name__ == "__main__":
    unittest.main()
