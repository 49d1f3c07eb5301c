"""Tests for discovery, messaging and review API endpoints."""

from httpx import AsyncClient


def _as(user: str) -> dict[str, str]:
    return {"X-User-Id": user}


async def _available_card(client: AsyncClient, owner: str, tags: list[str]) -> str:
    source = (await client.post("/photocards", json={"tags": tags})).json()["id"]
    card_id = (await client.post(f"/collection/cards/{source}", headers=_as(owner))).json()["id"]
    await client.post(f"/collection/cards/{card_id}/available", headers=_as(owner))
    return card_id


class TestDiscover:
    async def test_recommends_other_users_card(self, client: AsyncClient) -> None:
        card_id = await _available_card(client, "alice", ["red", "rare"])

        response = await client.get("/discover", headers=_as("bob"))

        assert response.status_code == 200
        data = response.json()
        assert data["photocard"] == card_id
        assert data["owner"] == "alice"
        assert data["owner_rating"] is None
        assert data["poor_rating"] is False
        assert data["msg"] == "Photocard recommended!"

    async def test_no_repeat_then_exhausted(self, client: AsyncClient) -> None:
        first = await _available_card(client, "alice", ["red", "rare"])
        second = await _available_card(client, "alice", ["blue", "rare"])

        seen = {
            (await client.get("/discover", headers=_as("bob"))).json()["photocard"]
            for _ in range(2)
        }
        exhausted = await client.get("/discover", headers=_as("bob"))

        assert seen == {first, second}
        assert exhausted.status_code == 403
        assert exhausted.json()["failure"]["kind"] == "forbidden"

    async def test_own_cards_not_recommended(self, client: AsyncClient) -> None:
        await _available_card(client, "alice", ["red", "rare"])

        response = await client.get("/discover", headers=_as("alice"))

        assert response.status_code == 403

    async def test_poor_rating_warning(self, client: AsyncClient) -> None:
        """Owners averaging below 3 are flagged."""
        await _available_card(client, "alice", ["red", "rare"])
        await client.post("/reviews/alice", json={"rating": 2}, headers=_as("carol"))

        data = (await client.get("/discover", headers=_as("bob"))).json()

        assert data["owner_rating"] == 2.0
        assert data["poor_rating"] is True
        assert "poor rating" in data["msg"]

    async def test_requires_user(self, client: AsyncClient) -> None:
        response = await client.get("/discover")

        assert response.status_code == 401


class TestMessages:
    async def test_send_and_read(self, client: AsyncClient) -> None:
        sent = await client.post("/messages/bob", json={"text": "hi"}, headers=_as("alice"))
        thread = await client.get("/messages/alice/bob", headers=_as("bob"))

        assert sent.status_code == 201
        assert thread.status_code == 200
        assert thread.json() == {
            "sender": "alice",
            "receiver": "bob",
            "messages": ["hi"],
            "read": True,
        }

    async def test_outsider_cannot_read(self, client: AsyncClient) -> None:
        await client.post("/messages/bob", json={"text": "hi"}, headers=_as("alice"))

        response = await client.get("/messages/alice/bob", headers=_as("mallory"))

        assert response.status_code == 403

    async def test_read_missing_thread(self, client: AsyncClient) -> None:
        response = await client.get("/messages/alice/bob", headers=_as("alice"))

        assert response.status_code == 404

    async def test_block_both_directions(self, client: AsyncClient) -> None:
        """Blocking refuses messages either way until unblocked."""
        blocked = await client.post("/blocks/bob", headers=_as("alice"))
        to_bob = await client.post("/messages/bob", json={"text": "hi"}, headers=_as("alice"))
        to_alice = await client.post("/messages/alice", json={"text": "hi"}, headers=_as("bob"))

        assert blocked.status_code == 200
        assert to_bob.status_code == 403
        assert to_alice.status_code == 403

        await client.delete("/blocks/bob", headers=_as("alice"))
        again = await client.post("/messages/bob", json={"text": "hi"}, headers=_as("alice"))
        assert again.status_code == 201

    async def test_double_block_conflicts(self, client: AsyncClient) -> None:
        await client.post("/blocks/bob", headers=_as("alice"))

        response = await client.post("/blocks/bob", headers=_as("alice"))

        assert response.status_code == 409

    async def test_unblock_not_blocked(self, client: AsyncClient) -> None:
        response = await client.delete("/blocks/bob", headers=_as("alice"))

        assert response.status_code == 404

    async def test_list_blocks(self, client: AsyncClient) -> None:
        await client.post("/blocks/bob", headers=_as("alice"))
        await client.post("/blocks/carol", headers=_as("alice"))

        data = (await client.get("/blocks", headers=_as("alice"))).json()

        assert data == {"user": "alice", "blocked": ["bob", "carol"]}

    async def test_empty_message_rejected(self, client: AsyncClient) -> None:
        response = await client.post("/messages/bob", json={"text": ""}, headers=_as("alice"))

        assert response.status_code == 422


class TestReviews:
    async def test_average_scenario(self, client: AsyncClient) -> None:
        await client.post("/reviews/u", json={"rating": 5}, headers=_as("r1"))
        await client.post("/reviews/u", json={"rating": 1}, headers=_as("r2"))
        assert (await client.get("/reviews/u/average")).json()["average"] == 3.0

        await client.post("/reviews/u", json={"rating": 2}, headers=_as("r1"))

        assert (await client.get("/reviews/u/average")).json()["average"] == 1.5

    async def test_out_of_range_rating(self, client: AsyncClient) -> None:
        response = await client.post("/reviews/u", json={"rating": 6}, headers=_as("r1"))

        assert response.status_code == 400
        assert response.json()["failure"]["kind"] == "invalid_argument"

    async def test_no_ratings(self, client: AsyncClient) -> None:
        data = (await client.get("/reviews/u/average")).json()

        assert data["average"] is None
        assert data["message"] == "No ratings found!"

    async def test_feedback(self, client: AsyncClient) -> None:
        await client.post(
            "/reviews/u", json={"rating": 5, "review": "great trade"}, headers=_as("r1")
        )
        await client.post("/reviews/u", json={"rating": 4}, headers=_as("r2"))

        data = (await client.get("/reviews/u/feedback")).json()

        assert data["reviews"] == {"r1": "great trade"}

    async def test_no_feedback(self, client: AsyncClient) -> None:
        data = (await client.get("/reviews/u/feedback")).json()

        assert data["reviews"] == {}
        assert data["message"] == "No reviews found!"

    async def test_rejected_rating_skips_review(self, client: AsyncClient) -> None:
        """The rating is checked before the review is written."""
        await client.post(
            "/reviews/u", json={"rating": 0, "review": "terrible"}, headers=_as("r1")
        )

        assert (await client.get("/reviews/u/feedback")).json()["reviews"] == {}
