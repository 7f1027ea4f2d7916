"""
Titles - issue tracker keys inside pull request titles
"""
import re
from typing import Optional, Tuple


TICKET_KEY = re.compile(r'[A-Z]{2,}-[0-9]+')
_TOKEN = re.compile(r'[A-Za-z0-9-]+')


def find_ticket_key(text: str) -> Optional[Tuple[int, int]]:
    """
    Locate the first tracker key such as ``CLK-142``.

    Only whole words count: ``XCLK-142b`` or ``clk-142`` are not keys.

    Returns:
        (start, end) slice of the key, or None
    """
    for token in _TOKEN.finditer(text):
        if TICKET_KEY.fullmatch(token.group()):
            return token.start(), token.end()
    return None


def split_title(title: str) -> Tuple[str, str, str]:
    """Split a title into (before, key, after); key is empty when there is none"""
    span = find_ticket_key(title)
    if span is None:
        return title, '', ''
    start, end = span
    return title[:start], title[start:end], title[end:]


def ticket_link(key: str, ticket_url: Optional[str]) -> Optional[str]:
    """Browse URL for a key, None when no tracker is configured"""
    if not key or not ticket_url:
        return None
    return ticket_url.replace('{key}', key)
