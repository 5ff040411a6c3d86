"""Feed fetcher tests."""
import asyncio
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp

from api.services.feed_fetcher import FeedFetcher, UNTITLED
from api.services.publisher import PublisherService
from shared.exceptions import FeedFetchError


LONG_BODY = "Yapay zeka alanında yeni gelişmeler yaşandı ve şirketler ürünlerini duyurdu. " * 3


def rss_feed(*items):
    """Build an RSS 2.0 document from item XML fragments."""
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss version="2.0" xmlns:content="http://purl.org/rss/1.0/modules/content/">'
        "<channel><title>Test</title><link>https://example.com</link>"
        + "".join(items)
        + "</channel></rss>"
    ).encode("utf-8")


def rss_item(link, title="Başlık", description="Kısa açıklama", content=None, extra=""):
    encoded = f"<content:encoded><![CDATA[{content}]]></content:encoded>" if content else ""
    return (
        f"<item><title>{title}</title><link>{link}</link>"
        f"<description>{description}</description>{encoded}{extra}</item>"
    )


TWO_ITEM_FEED = rss_feed(
    rss_item(
        "https://example.com/a",
        title="Birinci haber",
        content=f"<p>{LONG_BODY}</p>",
        extra=(
            "<category>Teknoloji</category><category>Teknoloji</category>"
            '<enclosure url="https://example.com/a.jpg" type="image/jpeg" length="100"/>'
        ),
    ),
    rss_item("https://example.com/b", title="İkinci haber", content=f"<p>{LONG_BODY}</p>"),
)


@pytest.fixture
def publisher():
    publisher = MagicMock()
    publisher.add_summarize_job = AsyncMock(return_value="job_001")
    return publisher


@pytest.fixture
def fetcher(mock_mongo_db, publisher):
    fetcher = FeedFetcher(mock_mongo_db, publisher)
    fetcher.article_repo.article_exists = AsyncMock(return_value=False)
    fetcher.article_repo.insert_if_absent = AsyncMock(side_effect=lambda article: article)
    return fetcher


class TestFetchArticlesFromRss:
    """Tests for FeedFetcher.fetch_articles_from_rss."""

    @pytest.mark.asyncio
    async def test_skips_known_urls(self, fetcher, publisher, sample_source):
        fetcher.source_repo.get_active_sources = AsyncMock(return_value=[sample_source])
        fetcher.article_repo.article_exists = AsyncMock(side_effect=[True, False])
        fetcher._download_feed = AsyncMock(return_value=TWO_ITEM_FEED)

        result = await fetcher.fetch_articles_from_rss()

        assert result.success is True
        assert result.articles_processed == 1
        assert result.errors == []
        assert result.message == "RSS fetch completed. Processed 1 new articles from 1 sources"

        stored = fetcher.article_repo.insert_if_absent.call_args.args[0]
        assert stored["canonical_url"] == "https://example.com/b"
        assert stored["source_id"] == sample_source["_id"]
        assert stored["is_summarized"] is False
        publisher.add_summarize_job.assert_awaited_once_with(stored["_id"], stored["original_content"])

    @pytest.mark.asyncio
    async def test_no_sources(self, fetcher):
        fetcher.source_repo.get_active_sources = AsyncMock(return_value=[])

        result = await fetcher.fetch_articles_from_rss()

        assert result.success is True
        assert result.message == "No RSS sources configured"
        assert result.articles_processed == 0

    @pytest.mark.asyncio
    async def test_source_listing_failure_propagates(self, fetcher):
        fetcher.source_repo.get_active_sources = AsyncMock(side_effect=RuntimeError("mongo down"))

        with pytest.raises(RuntimeError):
            await fetcher.fetch_articles_from_rss()

    @pytest.mark.asyncio
    async def test_failing_source_does_not_stop_others(self, fetcher, sample_source):
        broken = dict(sample_source, _id="src_broken", name="Broken", feed_url="https://broken.example/rss")
        fetcher.source_repo.get_active_sources = AsyncMock(return_value=[broken, sample_source])
        fetcher._download_feed = AsyncMock(
            side_effect=[FeedFetchError("Broken", "HTTP Error 500"), TWO_ITEM_FEED]
        )

        result = await fetcher.fetch_articles_from_rss()

        assert result.articles_processed == 2
        assert result.errors == ["RSS fetch error for Broken: HTTP Error 500"]

    @pytest.mark.asyncio
    async def test_item_failure_recorded(self, fetcher, sample_source):
        fetcher.source_repo.get_active_sources = AsyncMock(return_value=[sample_source])
        fetcher.article_repo.article_exists = AsyncMock(side_effect=[RuntimeError("boom"), False])
        fetcher._download_feed = AsyncMock(return_value=TWO_ITEM_FEED)

        result = await fetcher.fetch_articles_from_rss()

        assert result.articles_processed == 1
        assert result.errors == ["Article processing error for https://example.com/a: boom"]

    @pytest.mark.asyncio
    async def test_source_without_feed_url_skipped(self, fetcher, sample_source):
        fetcher.source_repo.get_active_sources = AsyncMock(
            return_value=[dict(sample_source, feed_url="  ")]
        )
        fetcher._download_feed = AsyncMock()

        result = await fetcher.fetch_articles_from_rss()

        assert result.articles_processed == 0
        fetcher._download_feed.assert_not_awaited()


class TestIngestion:
    """Tests for per-item ingestion rules."""

    @pytest.mark.asyncio
    async def test_concurrent_insert_not_counted(self, fetcher, publisher, sample_source):
        fetcher.article_repo.insert_if_absent = AsyncMock(return_value=None)
        fetcher._download_feed = AsyncMock(return_value=TWO_ITEM_FEED)

        result = await fetcher.process_new_source(sample_source)

        assert result.articles_processed == 0
        publisher.add_summarize_job.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_queue_failure_keeps_article(self, fetcher, sample_source, mock_redis_client):
        mock_redis_client.lpush = AsyncMock(side_effect=ConnectionError("redis down"))
        fetcher.publisher = PublisherService(mock_redis_client)
        fetcher._download_feed = AsyncMock(return_value=TWO_ITEM_FEED)

        result = await fetcher.process_new_source(sample_source)

        assert result.articles_processed == 2
        assert result.errors == []
        assert fetcher.article_repo.insert_if_absent.await_count == 2

    @pytest.mark.asyncio
    async def test_short_content_not_queued(self, fetcher, publisher, sample_source):
        feed = rss_feed(rss_item("https://example.com/short", description="Çok kısa içerik"))
        fetcher._download_feed = AsyncMock(return_value=feed)

        result = await fetcher.process_new_source(sample_source)

        assert result.articles_processed == 1
        publisher.add_summarize_job.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_new_source_capped(self, fetcher, sample_source):
        feed = rss_feed(*[rss_item(f"https://example.com/{i}") for i in range(15)])
        fetcher._download_feed = AsyncMock(return_value=feed)

        result = await fetcher.process_new_source(sample_source)

        assert result.articles_processed == 10
        assert result.message == "Processed 10 new articles from TestSource"

    @pytest.mark.asyncio
    async def test_items_without_link_skipped(self, fetcher, sample_source):
        feed = rss_feed("<item><title>Linksiz</title></item>", rss_item("https://example.com/ok"))
        fetcher._download_feed = AsyncMock(return_value=feed)

        result = await fetcher.process_new_source(sample_source)

        assert result.articles_processed == 1


class TestFetchFeed:
    """Tests for downloading and parsing feeds."""

    @pytest.mark.asyncio
    async def test_entries_in_feed_order(self, fetcher):
        fetcher._download_feed = AsyncMock(return_value=TWO_ITEM_FEED)

        entries = await fetcher.fetch_feed("TestSource", "https://example.com/feed.xml")

        assert [entry["link"] for entry in entries] == ["https://example.com/a", "https://example.com/b"]

    @pytest.mark.asyncio
    async def test_malformed_feed_raises(self, fetcher):
        fetcher._download_feed = AsyncMock(return_value=b"this is not a feed <unclosed")

        with pytest.raises(FeedFetchError) as exc_info:
            await fetcher.fetch_feed("TestSource", "https://example.com/feed.xml")

        assert exc_info.value.source_name == "TestSource"
        assert exc_info.value.reason.startswith("Malformed feed")

    @pytest.mark.asyncio
    async def test_timeout_mapped(self, fetcher):
        with patch("api.services.feed_fetcher.aiohttp.ClientSession", side_effect=asyncio.TimeoutError()):
            with pytest.raises(FeedFetchError) as exc_info:
                await fetcher._download_feed("TestSource", "https://example.com/feed.xml")

        assert exc_info.value.reason == f"Timeout after {fetcher.timeout} seconds"

    @pytest.mark.asyncio
    async def test_network_error_mapped(self, fetcher):
        error = aiohttp.ClientConnectionError("connection refused")
        with patch("api.services.feed_fetcher.aiohttp.ClientSession", side_effect=error):
            with pytest.raises(FeedFetchError) as exc_info:
                await fetcher._download_feed("TestSource", "https://example.com/feed.xml")

        assert exc_info.value.reason.startswith("Network error")


class TestNormalizeEntry:
    """Tests for turning feed entries into article fields."""

    @pytest.mark.asyncio
    async def test_fields_from_rss_item(self, fetcher):
        fetcher._download_feed = AsyncMock(return_value=TWO_ITEM_FEED)
        entries = await fetcher.fetch_feed("TestSource", "https://example.com/feed.xml")

        fields = fetcher.normalize_entry(entries[0])

        assert fields["title"] == "Birinci haber"
        assert fields["description"] == "Kısa açıklama"
        assert fields["original_content"] == LONG_BODY.strip()
        assert "<p>" not in fields["original_content"]
        assert fields["categories"] == ["Teknoloji"]
        assert fields["image_url"] == "https://example.com/a.jpg"

    def test_missing_title_and_content(self, fetcher):
        fields = fetcher.normalize_entry({"link": "https://example.com/x"})

        assert fields["title"] == UNTITLED
        assert fields["description"] == ""
        assert fields["original_content"] == ""
        assert fields["categories"] == []
        assert fields["image_url"] is None

    def test_summary_used_when_no_encoded_content(self, fetcher):
        fields = fetcher.normalize_entry({"title": "T", "summary": "<b>Özet</b> metni"})

        assert fields["original_content"] == "Özet metni"

    def test_media_thumbnail_image(self, fetcher):
        entry = {"title": "T", "media_thumbnail": [{"url": "https://example.com/t.png"}]}

        assert fetcher.normalize_entry(entry)["image_url"] == "https://example.com/t.png"

    def test_sanitize_text_truncates(self, mock_mongo_db):
        fetcher = FeedFetcher(mock_mongo_db, max_content_length=50)

        text = fetcher.sanitize_text("<div>" + "kelime " * 40 + "</div>")

        assert len(text) == 50
        assert "<div>" not in text


class TestParsePublishedDate:
    """Tests for publication date sanity checks."""

    NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

    def test_valid_date_kept(self, fetcher):
        published = self.NOW - timedelta(days=3)
        entry = {"published_parsed": published.timetuple()}

        assert fetcher.parse_published_date(entry, now=self.NOW) == published

    def test_missing_date_uses_now(self, fetcher):
        assert fetcher.parse_published_date({}, now=self.NOW) == self.NOW

    def test_unparseable_date_uses_now(self, fetcher):
        entry = {"published": "not-a-date"}

        assert fetcher.parse_published_date(entry, now=self.NOW) == self.NOW

    def test_invalid_tuple_uses_now(self, fetcher):
        entry = {"published_parsed": (2024, 13, 45, 0, 0, 0, 0, 0, 0)}

        assert fetcher.parse_published_date(entry, now=self.NOW) == self.NOW

    def test_older_than_a_year_uses_now(self, fetcher):
        entry = {"published_parsed": (self.NOW - timedelta(days=730)).timetuple()}

        assert fetcher.parse_published_date(entry, now=self.NOW) == self.NOW

    def test_future_date_uses_now(self, fetcher):
        entry = {"published_parsed": (self.NOW + timedelta(days=365)).timetuple()}

        assert fetcher.parse_published_date(entry, now=self.NOW) == self.NOW

    def test_updated_date_fallback(self, fetcher):
        updated = self.NOW - timedelta(hours=5)
        entry = {"updated_parsed": updated.timetuple()}

        assert fetcher.parse_published_date(entry, now=self.NOW) == updated

    def test_defaults_to_current_time(self, fetcher):
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        with patch("api.services.feed_fetcher.get_utc_now", return_value=now):
            assert fetcher.parse_published_date({"published": "garbage"}) == now
