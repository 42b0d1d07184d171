"""
Feed Parser - Fetch and parse RSS/Atom feeds.

Handles:
- RSS 2.0 and Atom 1.0 formats
- Date parsing across several formats in English and German
- Keeping only items published on the current local day
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, timezone, tzinfo

import aiohttp
import feedparser
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)


@dataclass
class FeedItem:
    """Represents a single item/entry from a feed."""
    title: str
    link: str
    description: str  # Plain text, HTML stripped
    published: datetime


@dataclass
class Feed:
    """Represents a parsed feed."""
    url: str
    title: str
    items: list[FeedItem]
    last_fetched: datetime


# (format, timezone assumed when the parsed value is naive)
# A None timezone means local time.
DATE_FORMATS: list[tuple[str, tzinfo | None]] = [
    ("%a, %d %b %Y %H:%M:%S %z", None),
    ("%a, %d %b %Y %H:%M:%S %Z", timezone.utc),
    ("%a, %d %b %y %H:%M:%S %z", None),
    ("%a, %d %b %y %H:%M:%S %Z", timezone.utc),
    ("%Y-%m-%dT%H:%M:%SZ", timezone.utc),
    ("%Y-%m-%dT%H:%M:%S%z", None),
    ("%Y-%m-%dT%H:%M:%S.%f%z", None),
    ("%Y-%m-%dT%H:%M:%S", None),
]

GERMAN_NAMES = {
    "mo": "Mon", "di": "Tue", "mi": "Wed", "do": "Thu", "fr": "Fri", "sa": "Sat", "so": "Sun",
    "jan": "Jan", "feb": "Feb", "mär": "Mar", "mrz": "Mar", "apr": "Apr", "mai": "May",
    "jun": "Jun", "jul": "Jul", "aug": "Aug", "sep": "Sep", "okt": "Oct", "nov": "Nov",
    "dez": "Dec",
}

_GERMAN_NAME_PATTERN = re.compile(
    r"\b(" + "|".join(GERMAN_NAMES) + r")[a-zä]*\.?(?=[\s,]|$)",
    re.IGNORECASE,
)


def _translate_german(value: str) -> str:
    """Replace German day and month names with their English abbreviations."""
    return _GERMAN_NAME_PATTERN.sub(lambda m: GERMAN_NAMES[m.group(1).lower()], value)


def _try_formats(value: str) -> datetime | None:
    for fmt, assumed_tz in DATE_FORMATS:
        try:
            parsed = datetime.strptime(value, fmt)
        except ValueError:
            continue
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=assumed_tz) if assumed_tz else parsed.astimezone()
        return parsed
    return None


def parse_date(value: str | None) -> datetime:
    """
    Parse a feed timestamp.

    Tries every known format with English names, then with German names.
    Returns the current time if nothing matches.
    """
    if not value or not value.strip():
        return datetime.now(timezone.utc)

    value = value.strip()
    parsed = _try_formats(value)
    if parsed is None:
        translated = _translate_german(value)
        if translated != value:
            parsed = _try_formats(translated)

    if parsed is None:
        logger.warning(f"Failed to parse date: {value}")
        return datetime.now(timezone.utc)
    return parsed


def is_today(published: datetime, today: date | None = None) -> bool:
    """Check whether a timestamp falls on the current local calendar day."""
    today = today or date.today()
    return published.astimezone().date() == today


def strip_html(html: str) -> str:
    """Remove tags and return plain text."""
    if not html:
        return ""
    return BeautifulSoup(html, "html.parser").get_text(separator=" ", strip=True)


class FeedParser:
    """Fetches and parses RSS/Atom feeds."""

    def __init__(self, timeout: int = 30, user_agent: str | None = None):
        self.timeout = timeout
        self.user_agent = user_agent or "Newsarize/1.0"

    async def fetch(self, url: str) -> Feed:
        """Fetch and parse a feed URL. Raises on network, HTTP or parse errors."""
        headers = {"User-Agent": self.user_agent}

        async with aiohttp.ClientSession() as session:
            async with session.get(
                url,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as resp:
                resp.raise_for_status()
                content = await resp.text()

        return self._parse(url, content)

    async def fetch_today(self, url: str, today: date | None = None) -> list[FeedItem]:
        """Fetch a feed and keep only items published today."""
        feed = await self.fetch(url)
        return [item for item in feed.items if is_today(item.published, today)]

    def _parse(self, url: str, content: str) -> Feed:
        """Parse feed content using feedparser."""
        parsed = feedparser.parse(content)

        if parsed.bozo and not parsed.entries:
            raise ValueError(f"Failed to parse feed: {parsed.bozo_exception}")

        items = []
        for entry in parsed.entries:
            link = self._entry_link(entry)
            if not link:
                logger.debug(f"Skipping entry without link in {url}")
                continue

            # Prefer description/summary over full content
            raw_description = entry.get("summary", "")
            if not raw_description and entry.get("content"):
                raw_description = entry.content[0].value

            items.append(FeedItem(
                title=entry.get("title") or "Untitled",
                link=link,
                description=strip_html(raw_description),
                published=parse_date(entry.get("published") or entry.get("updated")),
            ))

        return Feed(
            url=url,
            title=parsed.feed.get("title", "Unknown Feed"),
            items=items,
            last_fetched=datetime.now(timezone.utc),
        )

    @staticmethod
    def _entry_link(entry) -> str:
        """Prefer an explicit rel="alternate" link, else the entry's default link."""
        for link in entry.get("links", []):
            if link.get("rel") == "alternate" and link.get("href"):
                return link["href"]
        return entry.get("link", "")


def parse_feed_sync(content: str, url: str = "") -> Feed:
    """
    Synchronous feed parsing (for use when content is already fetched).

    Useful for testing or when you already have the feed content.
    """
    parser = FeedParser()
    return parser._parse(url, content)
