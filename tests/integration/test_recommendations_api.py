"""
Integration tests for GET /recommendations.
"""
from fastapi.testclient import TestClient

from tests.factories import make_raw_video


def seed_trending(fake_catalog, count=5):
    fake_catalog.add(
        *(make_raw_video(f"t{n}", channel_id="chan_t") for n in range(count)),
        trending=True,
    )


class TestRecommendationsAPI:
    def test_anonymous_equals_trending(self, test_client: TestClient, fake_catalog):
        seed_trending(fake_catalog)
        fake_catalog.add(make_raw_video("tshort", duration="PT10S"), trending=True)

        recommendations = test_client.get("/recommendations")
        trending = test_client.get("/videos/trending")

        assert recommendations.status_code == 200
        assert recommendations.json() == trending.json()
        assert recommendations.headers["X-Personalized"] == "false"
        assert recommendations.headers["Cache-Control"].startswith("public")
        assert recommendations.headers["Vary"] == "X-User-Id"

    def test_unknown_user_is_anonymous(self, test_client: TestClient, fake_catalog):
        seed_trending(fake_catalog)

        response = test_client.get("/recommendations", headers={"X-User-Id": "999"})

        assert response.status_code == 200
        assert response.headers["X-Personalized"] == "false"

    def test_personalized_from_watched_channel(
        self, test_client: TestClient, fake_catalog, auth_headers
    ):
        fake_catalog.add(
            make_raw_video("a0", channel_id="chan_a"),
            make_raw_video("a1", channel_id="chan_a"),
            make_raw_video("a2", channel_id="chan_a", duration="PT20S"),
        )
        seed_trending(fake_catalog)

        # Caches a0 so the watch contributes channel weight
        test_client.get("/videos/a0")
        test_client.post("/watch-history", json={"videoId": "a0"}, headers=auth_headers)

        response = test_client.get("/recommendations", headers=auth_headers)

        assert response.status_code == 200
        ids = [v["id"] for v in response.json()]
        assert ids == ["a1", "t0", "t1", "t2", "t3", "t4"]
        assert response.headers["X-Personalized"] == "true"
        assert response.headers["Cache-Control"].startswith("private")
        assert response.headers["Vary"] == "X-User-Id"

    def test_failing_channel_does_not_fail_request(
        self, test_client: TestClient, fake_catalog, auth_headers
    ):
        fake_catalog.add(make_raw_video("a0", channel_id="chan_a"))
        fake_catalog.failing_channels.add("chan_a")
        seed_trending(fake_catalog, 3)
        test_client.get("/videos/a0")
        test_client.post("/watch-history", json={"videoId": "a0"}, headers=auth_headers)

        response = test_client.get("/recommendations", headers=auth_headers)

        assert response.status_code == 200
        assert [v["id"] for v in response.json()] == ["t0", "t1", "t2"]

    def test_backfill_failure_is_500(self, test_client: TestClient, fake_catalog, auth_headers):
        fake_catalog.fail_trending = True

        response = test_client.get("/recommendations", headers=auth_headers)

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "UPSTREAM_ERROR"
