"""
Tests for observable primitives and the filtered view state.
"""

import pytest

from newsarize.database import ReadFilter
from newsarize.reactive import EventStream, LiveQuery, StateValue
from newsarize.view_state import ArticleFilters, NewsViewState, ScrollToTop

from .fakes import filters_match, make_article


def listener_count(db) -> int:
    return len(db._connection._listeners)


@pytest.fixture
def feed_id(test_db):
    return test_db.add_feed("Feed", "https://example.com/rss")


@pytest.fixture
def view(test_db):
    view_state = NewsViewState(test_db)
    yield view_state
    view_state.close()


class TestStateValue:
    def test_subscriber_gets_current_and_changes(self):
        value = StateValue(1)
        seen = []
        value.subscribe(seen.append)
        value.value = 2
        value.value = 2
        value.value = 3
        assert seen == [1, 2, 3]

    def test_cancelled_subscription(self):
        value = StateValue("a")
        seen = []
        subscription = value.subscribe(seen.append)
        subscription.cancel()
        subscription.cancel()
        value.value = "b"
        assert seen == ["a"]
        assert subscription.cancelled


class TestEventStream:
    def test_only_later_events_are_delivered(self):
        stream = EventStream()
        stream.emit("early")
        seen = []
        stream.subscribe(seen.append)
        stream.emit("late")
        assert seen == ["late"]

    def test_failing_subscriber_does_not_block_others(self):
        stream = EventStream()
        seen = []

        def broken(event):
            raise RuntimeError("boom")

        stream.subscribe(broken)
        stream.subscribe(seen.append)
        stream.emit("x")
        assert seen == ["x"]


class TestLiveQuery:
    def test_refreshes_on_watched_table(self, test_db, feed_id):
        query = LiveQuery(test_db, ["articles"], lambda: len(test_db.get_articles()))
        seen = []
        query.subscribe(seen.append)

        test_db.add_articles([make_article(feed_id, "https://example.com/a")])
        test_db.add_category("#Tech")

        assert seen == [0, 1]
        assert query.value == 1

    def test_detaches_when_last_subscriber_leaves(self, test_db):
        before = listener_count(test_db)
        query = LiveQuery(test_db, ["feeds"], test_db.get_feeds)
        first = query.subscribe(lambda feeds: None)
        second = query.subscribe(lambda feeds: None)
        assert listener_count(test_db) == before + 1

        first.cancel()
        assert listener_count(test_db) == before + 1
        second.cancel()
        assert listener_count(test_db) == before


class TestArticleFilters:
    def test_default_matches_everything(self, test_db, feed_id):
        test_db.add_articles([make_article(feed_id, "https://example.com/a")])
        [article] = test_db.get_articles()
        assert filters_match(ArticleFilters(), article)

    def test_all_filters_must_match(self, test_db, feed_id):
        [article_id] = test_db.add_articles([make_article(feed_id, "https://example.com/a")])
        test_db.store_processing_result(article_id, "s", "#Tech")
        article = test_db.get_article(article_id)

        assert filters_match(ArticleFilters(feed_id, ReadFilter.UNREAD, "#Tech"), article)
        assert not filters_match(ArticleFilters(feed_id, ReadFilter.READ, "#Tech"), article)
        assert not filters_match(ArticleFilters(feed_id + 1, ReadFilter.UNREAD, "#Tech"), article)
        assert not filters_match(ArticleFilters(feed_id, ReadFilter.UNREAD, "#Politik"), article)


class TestNewsViewState:
    def test_initial_lists(self, test_db, feed_id):
        test_db.add_category("#Tech")
        view = NewsViewState(test_db)
        try:
            assert [f.id for f in view.feeds.value] == [feed_id]
            assert [c.name for c in view.all_categories.value] == ["#Tech"]
            assert view.articles.value == []
        finally:
            view.close()

    def test_article_list_follows_inserts(self, view, test_db, feed_id):
        test_db.add_articles([make_article(feed_id, "https://example.com/a")])
        assert [a.link for a in view.articles.value] == ["https://example.com/a"]

    def test_article_list_follows_processing(self, view, test_db, feed_id):
        [article_id] = test_db.add_articles([make_article(feed_id, "https://example.com/a")])
        test_db.add_category("#Tech")
        test_db.store_processing_result(article_id, "Kurz.", "#Tech")

        assert view.articles.value[0].summary == "Kurz."
        assert [c.name for c in view.used_categories.value] == ["#Tech"]

    def test_read_filter(self, view, test_db, feed_id):
        ids = test_db.add_articles([
            make_article(feed_id, "https://example.com/a", hours_ago=2),
            make_article(feed_id, "https://example.com/b", hours_ago=1),
        ])
        view.set_read_filter(ReadFilter.UNREAD)
        view.toggle_article_read(ids[1])

        assert [a.id for a in view.articles.value] == [ids[0]]

        view.set_read_filter(ReadFilter.READ)
        assert [a.id for a in view.articles.value] == [ids[1]]

    def test_filters_are_independent(self, view, test_db, feed_id):
        view.set_selected_category("#Tech")
        view.set_read_filter(ReadFilter.UNREAD)
        view.set_selected_feed(feed_id)
        assert view.filters.value == ArticleFilters(feed_id, ReadFilter.UNREAD, "#Tech")

        view.set_selected_category(None)
        assert view.filters.value == ArticleFilters(feed_id, ReadFilter.UNREAD, None)

    def test_filter_change_scrolls_to_top(self, view):
        events = []
        view.events.subscribe(events.append)
        view.set_read_filter(ReadFilter.READ)
        assert events == [ScrollToTop()]

    def test_superseded_queries_are_detached(self, view, test_db):
        before = listener_count(test_db)
        for read_filter in (ReadFilter.READ, ReadFilter.UNREAD, ReadFilter.ALL):
            view.set_read_filter(read_filter)
        assert listener_count(test_db) == before

    def test_switch_delivers_only_latest_filter(self, view, test_db, feed_id):
        other = test_db.add_feed("Other", "https://other.example.com/rss")
        test_db.add_articles([
            make_article(feed_id, "https://example.com/a"),
            make_article(other, "https://other.example.com/a"),
        ])
        seen = []
        view.articles.subscribe(lambda rows: seen.append({a.feed_id for a in rows}))

        view.set_selected_feed(feed_id)
        view.set_selected_feed(other)
        test_db.add_articles([make_article(feed_id, "https://example.com/b")])

        assert seen[-1] == {other}
        assert all(len(x) == 1 for x in seen[1:])

    def test_deleting_selected_feed_resets_filter(self, view, test_db, feed_id):
        test_db.add_articles([make_article(feed_id, "https://example.com/a")])
        view.set_selected_feed(feed_id)

        view.delete_feed(feed_id)

        assert view.filters.value.feed_id is None
        assert view.feeds.value == []
        assert view.articles.value == []

    def test_add_feed_and_category(self, view):
        view.add_feed("Neu", "https://new.example.com/rss")
        view.add_category("#Lokal")
        assert [f.name for f in view.feeds.value] == ["Neu"]
        assert [c.name for c in view.all_categories.value] == ["#Lokal"]

    def test_set_article_read(self, view, test_db, feed_id):
        [article_id] = test_db.add_articles([make_article(feed_id, "https://example.com/a")])
        assert view.set_article_read(article_id) is True
        assert view.articles.value[0].is_read is True

    def test_close_detaches_everything(self, test_db):
        before = listener_count(test_db)
        view = NewsViewState(test_db)
        assert listener_count(test_db) > before
        view.close()
        assert listener_count(test_db) == before
