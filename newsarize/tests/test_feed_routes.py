"""
Tests for feed routes.
"""

from newsarize.config import state

from .fakes import FakeFeedParser, make_item


class TestListFeeds:
    """Tests for GET /feeds endpoint."""

    def test_list_feeds_empty(self, client):
        """Should return empty list when no feeds."""
        response = client.get("/feeds")
        assert response.status_code == 200
        assert response.json() == []

    def test_list_feeds_has_required_fields(self, client_with_data):
        """Each feed should have required fields."""
        client, data = client_with_data
        [feed] = client.get("/feeds").json()
        assert feed["id"] == data["feed_id"]
        assert feed["name"] == "Test Feed"
        assert feed["url"] == "https://example.com/feed.xml"
        assert feed["last_fetched"] is None
        assert feed["fetch_error"] is None


class TestAddFeed:
    """Tests for POST /feeds endpoint."""

    def test_add_feed(self, client):
        """Should add a feed without contacting it."""
        response = client.post("/feeds", json={
            "name": "Tagesschau",
            "url": "https://www.tagesschau.de/xml/rss2"
        })
        assert response.status_code == 200
        feed = response.json()
        assert feed["name"] == "Tagesschau"
        assert [f["id"] for f in client.get("/feeds").json()] == [feed["id"]]

    def test_add_feed_missing_url(self, client):
        """Should require URL."""
        response = client.post("/feeds", json={"name": "Ohne URL"})
        assert response.status_code == 422

    def test_add_feed_empty_name(self, client):
        """Should require a non-empty name."""
        response = client.post("/feeds", json={"name": "", "url": "https://example.com/rss"})
        assert response.status_code == 422

    def test_add_feed_blank_name(self, client):
        """Whitespace-only names are rejected and nothing is stored."""
        response = client.post("/feeds", json={"name": "   ", "url": "https://example.com/rss"})
        assert response.status_code == 400
        assert client.get("/feeds").json() == []

    def test_add_feed_blank_url(self, client):
        """Whitespace-only URLs are rejected."""
        response = client.post("/feeds", json={"name": "Feed", "url": " "})
        assert response.status_code == 400


class TestDeleteFeed:
    """Tests for DELETE /feeds/{feed_id} endpoint."""

    def test_delete_feed(self, client_with_data):
        """Should delete a feed and its articles."""
        client, data = client_with_data
        response = client.delete(f"/feeds/{data['feed_id']}")
        assert response.status_code == 200
        assert client.get("/feeds").json() == []
        assert client.get("/articles").json() == []

    def test_delete_feed_not_found(self, client):
        """Should return 404 for missing feed."""
        response = client.delete("/feeds/99999")
        assert response.status_code == 404


class TestRefreshFeeds:
    """Tests for POST /feeds/refresh endpoint."""

    def test_refresh_inserts_articles(self, client):
        """Should ingest today's items of every feed."""
        feed_a = client.post("/feeds", json={"name": "A", "url": "https://a.example.com/rss"}).json()
        client.post("/feeds", json={"name": "B", "url": "https://b.example.com/rss"})
        state.feed_parser = FakeFeedParser({
            "https://a.example.com/rss": [make_item("https://a.example.com/1"), make_item("https://a.example.com/2")],
            "https://b.example.com/rss": [make_item("https://b.example.com/1"), make_item("https://b.example.com/2")],
        })

        response = client.post("/feeds/refresh")

        assert response.status_code == 200
        assert response.json() == {
            "new_articles": 4,
            "failed_feeds": [],
            "message": "4 neue Artikel gefunden",
        }
        assert len(client.get("/articles").json()) == 4
        assert client.get("/feeds").json()[0]["id"] == feed_a["id"]

    def test_refresh_twice_adds_nothing(self, client):
        """Known links are skipped on the next refresh."""
        client.post("/feeds", json={"name": "A", "url": "https://a.example.com/rss"})
        state.feed_parser = FakeFeedParser({"https://a.example.com/rss": [make_item("https://a.example.com/1")]})

        client.post("/feeds/refresh")
        response = client.post("/feeds/refresh")

        assert response.json()["new_articles"] == 0
        assert response.json()["message"] == "Keine neuen Artikel in abonnierten Feeds"

    def test_refresh_reports_failed_feeds(self, client):
        """A failing feed is reported and recorded on the feed."""
        feed = client.post("/feeds", json={"name": "A", "url": "https://a.example.com/rss"}).json()
        state.feed_parser = FakeFeedParser({}, failing={"https://a.example.com/rss"})

        response = client.post("/feeds/refresh")

        assert response.status_code == 200
        assert response.json()["failed_feeds"] == [feed["id"]]
        assert client.get("/feeds").json()[0]["fetch_error"] is not None

    def test_refresh_rejected_while_running(self, client):
        """Should refuse a concurrent refresh."""
        state.refresh_in_progress = True
        try:
            response = client.post("/feeds/refresh")
        finally:
            state.refresh_in_progress = False
        assert response.status_code == 409
