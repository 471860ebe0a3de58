import logging
import re
import time
from dataclasses import dataclass
from typing import Optional

import requests
from bs4 import BeautifulSoup

from .config import settings

logger = logging.getLogger(__name__)

_WS = re.compile(r"\s+")


@dataclass
class PageText:
    text: str
    error: Optional[str] = None  # why the page could not be read, if it couldn't


def html_to_text(html: str, max_chars: int) -> str:
    """Reduce raw markup to a single line of plain text, at most max_chars long."""
    soup = BeautifulSoup(html, "lxml")
    for tag in soup(["script", "style"]):
        tag.decompose()
    text = _WS.sub(" ", soup.get_text(" ")).strip()
    return text[:max_chars]


def _read_capped(resp, max_bytes: int, deadline: float) -> bytes:
    """Read the body in chunks, stopping at max_bytes; raise Timeout past the deadline."""
    chunks, size = [], 0
    for chunk in resp.iter_content(chunk_size=16384):
        if not chunk:
            continue
        chunks.append(chunk)
        size += len(chunk)
        if size >= max_bytes:
            break
        if time.monotonic() > deadline:
            raise requests.Timeout("page fetch exceeded its time budget")
    return b"".join(chunks)[:max_bytes]


def extract_page_text(url: str) -> PageText:
    """Best-effort fetch of a listing page. Never raises; degrades to empty text."""
    deadline = time.monotonic() + settings.PAGE_FETCH_TIMEOUT
    try:
        with requests.get(
            url,
            timeout=settings.PAGE_FETCH_TIMEOUT,
            headers={"User-Agent": settings.USER_AGENT},
            stream=True,
        ) as resp:
            resp.raise_for_status()
            body = _read_capped(resp, settings.PAGE_FETCH_MAX_BYTES, deadline)
            html = body.decode(resp.encoding or "utf-8", errors="replace")
        return PageText(html_to_text(html, settings.PAGE_TEXT_MAX_CHARS))
    except requests.Timeout:
        reason = "timed out fetching the page"
    except requests.HTTPError as e:
        reason = f"page returned HTTP {e.response.status_code if e.response is not None else 'error'}"
    except requests.RequestException as e:
        reason = f"network error: {e.__class__.__name__}"
    except Exception as e:
        reason = f"could not read page: {e.__class__.__name__}"

    logger.warning("Page fetch/strip failed for %s: %s", url, reason,
                   extra={"error_kind": "extraction_degraded"})
    return PageText("", reason)
