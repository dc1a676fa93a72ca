from __future__ import annotations

import unicodedata
from typing import Optional
from urllib.parse import unquote, urlparse


def is_well_formed_url(url: Optional[str]) -> bool:
    """True for absolute http(s) URLs with a host."""
    if not url or not isinstance(url, str):
        return False
    text = url.strip()
    if not text or any(ch.isspace() for ch in text):
        return False
    try:
        parsed = urlparse(text)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc) and bool(parsed.hostname)


def normalize_linkedin_profile_url(url: Optional[str]) -> Optional[str]:
    """Canonicalize a LinkedIn profile URL to ``https://linkedin.com/in/{slug}``.

    Non-LinkedIn URLs are returned stripped but otherwise unchanged; malformed
    input yields None.
    """
    if not is_well_formed_url(url):
        return None
    text = str(url).strip()
    u = urlparse(text)
    host = (u.hostname or '').lower()
    if host.startswith('www.'):
        host = host[4:]
    if not (host == 'linkedin.com' or host.endswith('.linkedin.com')):
        return text
    path = (u.path or '').rstrip('/')
    parts = [p for p in path.split('/') if p]
    if len(parts) >= 2 and parts[0] == 'in':
        # Keep only /in/{slug} and drop trailing locale/segments (e.g., /de, /en)
        slug = unicodedata.normalize('NFKC', unquote(parts[1])).strip().lower()
        # Remove invisible characters occasionally present
        slug = slug.replace('\u200b', '').replace('\u200c', '').replace('\u200d', '')
        return f"https://linkedin.com/in/{slug}"
    return f"https://linkedin.com{path}"
