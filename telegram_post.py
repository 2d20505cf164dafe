"""Random picture lookup for public Telegram channels.

Telegram exposes a channel's newest posts through an unauthenticated preview
page (https://t.me/s/<channel>) and every single post through an embeddable
widget (https://t.me/<channel>/<id>?embed=1&mode=tme). Neither has a stable
API, so everything here is scraped from the rendered markup:

- the newest post id is read from the permalink of the last message on the
  preview page
- a random post id is drawn from a trailing window below it
- the picture URL is read from the inline ``background-image`` style of the
  post's photo wrapper

Every failure (network, status, markup drift) turns into a failed
``PostLookup`` instead of an exception; the public entry point returns
``None`` when no picture could be obtained.
"""
from __future__ import annotations

import asyncio
import logging
import random
import re
from dataclasses import dataclass
from typing import Generic, Optional, Sequence, TypeVar

import aiohttp
from bs4 import BeautifulSoup

from config import TelegramPostConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

CHANNEL_URL_FORMAT = "https://{host}/s/{channel}"
POST_URL_FORMAT = "https://{host}/{channel}/{post_id}?embed=1&mode=tme"

# Markup markers used by the Telegram widgets
MESSAGE_CLASS = "tgme_widget_message"
MESSAGE_DATE_CLASS = "tgme_widget_message_date"
PHOTO_WRAP_CLASS = "tgme_widget_message_photo_wrap"

BACKGROUND_IMAGE_RE = re.compile(r"background-image:url\('(?P<url>.*?)'\)")


@dataclass(frozen=True)
class TelegramRandomMeme:
    photo_link: str


@dataclass(frozen=True)
class PostLookup(Generic[T]):
    """Outcome of one lookup step: a value, or the reason it is missing."""

    value: Optional[T] = None
    reason: Optional[str] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.reason is None

    @classmethod
    def found(cls, value: T) -> "PostLookup[T]":
        return cls(value=value)

    @classmethod
    def failed(cls, reason: str, error: Optional[BaseException] = None) -> "PostLookup[T]":
        return cls(reason=reason, error=error)


def pick_channel(channels: Sequence[str], rng: random.Random) -> str:
    """Pick one channel uniformly at random. ``channels`` must not be empty."""
    return rng.choice(channels)


def pick_post_id(last_post_id: int, scan_count: int, rng: random.Random) -> int:
    """Draw a post id from ``[max(1, last_post_id - scan_count), last_post_id]``."""
    first_post_id = max(1, last_post_id - scan_count)
    return rng.randint(first_post_id, last_post_id)


def parse_last_post_id(html: str, channel: str) -> PostLookup[int]:
    """Find the id of the newest post listed on a channel preview page.

    The preview page renders posts oldest to newest, so the last message
    container holds the newest post. Its date link is the post permalink,
    e.g. ``https://t.me/somechannel/1234``.
    """
    soup = BeautifulSoup(html, "html.parser")
    messages = soup.find_all("div", class_=MESSAGE_CLASS)
    if not messages:
        return PostLookup.failed("no_messages")

    last_message = messages[-1]
    permalink = last_message.find("a", class_=MESSAGE_DATE_CLASS)
    href = permalink.get("href", "") if permalink is not None else ""
    if not href or f"/{channel}/" not in href:
        return PostLookup.failed("no_permalink")

    tail = href.rstrip("/").split("/")[-1].split("?")[0]
    try:
        post_id = int(tail)
    except ValueError as e:
        return PostLookup.failed("bad_post_id", e)
    if post_id <= 0:
        return PostLookup.failed("bad_post_id")
    return PostLookup.found(post_id)


def extract_photo_url(html: str) -> PostLookup[str]:
    """Read the picture URL from an embedded post's photo wrapper style."""
    soup = BeautifulSoup(html, "html.parser")
    wrap = soup.find("a", class_=PHOTO_WRAP_CLASS)
    if wrap is None:
        return PostLookup.failed("no_photo")

    match = BACKGROUND_IMAGE_RE.search(wrap.get("style", ""))
    if not match:
        return PostLookup.failed("no_style_match")
    url = match.group("url")
    if not url:
        return PostLookup.failed("empty_url")
    return PostLookup.found(url)


class TelegramPostService:
    """Fetches a random picture from one of the configured Telegram channels."""

    def __init__(
        self,
        config: TelegramPostConfig,
        session: aiohttp.ClientSession,
        rng: Optional[random.Random] = None,
    ):
        self.config = config
        self.session = session
        # SystemRandom keeps no state, so concurrent lookups can share it
        self.rng = rng or random.SystemRandom()
        self.timeout = aiohttp.ClientTimeout(total=config.http_timeout)

    def channel_url(self, channel: str) -> str:
        return CHANNEL_URL_FORMAT.format(host=self.config.host, channel=channel)

    def post_url(self, channel: str, post_id: int) -> str:
        return POST_URL_FORMAT.format(host=self.config.host, channel=channel, post_id=post_id)

    async def get_random_post_picture(self) -> Optional[TelegramRandomMeme]:
        channel = pick_channel(self.config.channel_names, self.rng)

        last_post = await self.get_last_post_id(channel)
        if not last_post.ok:
            logger.error(
                f"Failed to get last post id for channel {channel}: {last_post.reason}"
            )
            return None

        return await self.get_post_picture(channel, last_post.value)

    async def get_post_picture(
        self, channel: str, last_post_id: Optional[int]
    ) -> Optional[TelegramRandomMeme]:
        """Try up to ``max_retries`` random recent posts, return the first picture."""
        if last_post_id is None:
            return None

        for attempt in range(1, self.config.max_retries + 1):
            post_id = pick_post_id(last_post_id, self.config.scan_count, self.rng)
            lookup = await self.fetch_post_picture(channel, post_id)
            if lookup.ok:
                logger.debug(f"Found picture in {channel}/{post_id} on attempt {attempt}")
                return TelegramRandomMeme(lookup.value)

            logger.warning(
                f"Failed to get random post {post_id} picture for telegram channel {channel} "
                f"(attempt {attempt}/{self.config.max_retries}): {lookup.reason}",
                exc_info=lookup.error,
            )
        return None

    async def get_last_post_id(self, channel: str) -> PostLookup[int]:
        page = await self._get_text(self.channel_url(channel))
        if not page.ok:
            return PostLookup.failed(page.reason, page.error)
        return parse_last_post_id(page.value, channel)

    async def fetch_post_picture(self, channel: str, post_id: int) -> PostLookup[str]:
        page = await self._get_text(self.post_url(channel, post_id))
        if not page.ok:
            return PostLookup.failed(page.reason, page.error)
        return extract_photo_url(page.value)

    async def _get_text(self, url: str) -> PostLookup[str]:
        try:
            async with self.session.get(url, timeout=self.timeout) as resp:
                if not 200 <= resp.status < 300:
                    logger.info(f"GET {url} returned HTTP {resp.status}")
                    return PostLookup.failed("bad_status")
                return PostLookup.found(await resp.text())
        except (aiohttp.ClientError, asyncio.TimeoutError, UnicodeDecodeError) as e:
            logger.info(f"GET {url} failed: {e!r}")
            return PostLookup.failed("http_error", e)
