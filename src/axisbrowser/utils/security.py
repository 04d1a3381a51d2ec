"""
Security utilities for Axis Browser.

This module provides input sanitization for everything the user can type into
the browser: the url bar, tab titles and folder names. Unsafe navigation input
is never reported as an error; it is rewritten into a search query so the
caller always receives something navigable.
"""

import re
from typing import Optional
from urllib.parse import quote_plus, urlparse

from .logger import get_logger


class SecurityConfig:
    """Security configuration and limits."""

    BLOCKED_SCHEMES = frozenset({"javascript", "data", "vbscript", "file", "ftp"})
    WEB_SCHEMES = frozenset({"http", "https"})
    INTERNAL_SCHEME = "axis"

    MAX_URL_LENGTH = 8192
    MAX_TITLE_LENGTH = 256
    MAX_FOLDER_NAME_LENGTH = 128

    DEFAULT_SEARCH_TEMPLATE = "https://www.google.com/search?q={query}"


_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")
_SCHEME_RE = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.\-]*):")
_DOMAIN_RE = re.compile(
    r"^(?:localhost"
    r"|(?:\d{1,3}\.){3}\d{1,3}"
    r"|(?:[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?\.)+[a-z]{2,63})"
    r"(?::\d{1,5})?"
    r"(?:[/?#]\S*)?$",
    re.IGNORECASE,
)


def has_control_characters(text: str) -> bool:
    return bool(_CONTROL_CHARS_RE.search(text))


def get_scheme(text: str) -> Optional[str]:
    match = _SCHEME_RE.match(text)
    return match.group(1).lower() if match else None


def is_internal_url(url: Optional[str]) -> bool:
    return bool(url) and get_scheme(url) == SecurityConfig.INTERNAL_SCHEME


def is_recordable_url(url: Optional[str]) -> bool:
    """True for urls that point at real content (not blank, about: or internal pages)."""
    if not url or not url.strip():
        return False
    scheme = get_scheme(url)
    if scheme in ("about", SecurityConfig.INTERNAL_SCHEME):
        return False
    return scheme not in SecurityConfig.BLOCKED_SCHEMES


def get_origin(url: Optional[str]) -> Optional[str]:
    """Return ``scheme://host[:port]`` for web urls, None otherwise."""
    if not url:
        return None
    parsed = urlparse(url)
    if parsed.scheme not in SecurityConfig.WEB_SCHEMES or not parsed.netloc:
        return None
    return f"{parsed.scheme}://{parsed.netloc.lower()}"


class UrlSanitizer:
    """Turns url-bar input into a url that is safe to hand to a view."""

    def __init__(self, search_template: str = SecurityConfig.DEFAULT_SEARCH_TEMPLATE):
        self.logger = get_logger("axisbrowser.security.url")
        self.search_template = search_template

    def build_search_url(self, query: str) -> str:
        cleaned = _CONTROL_CHARS_RE.sub(" ", query)
        cleaned = " ".join(cleaned.split())
        return self.search_template.replace("{query}", quote_plus(cleaned))

    def to_navigable_url(self, text: Optional[str]) -> Optional[str]:
        """
        Classify url-bar input.

        Args:
            text: Raw user input

        Returns:
            A navigable url, or None when the input is empty
        """
        if text is None:
            return None
        candidate = text.strip()
        if not candidate:
            return None
        if len(candidate) > SecurityConfig.MAX_URL_LENGTH:
            candidate = candidate[: SecurityConfig.MAX_URL_LENGTH]

        if has_control_characters(candidate):
            self.logger.warning("Rejected url input containing control characters")
            return self.build_search_url(candidate)

        scheme = get_scheme(candidate)
        if scheme in SecurityConfig.BLOCKED_SCHEMES:
            self.logger.warning(f"Rejected url with blocked scheme '{scheme}:'")
            return self.build_search_url(candidate)

        if scheme in SecurityConfig.WEB_SCHEMES and candidate[len(scheme) + 1 :].startswith("//"):
            if urlparse(candidate).netloc and " " not in candidate:
                return candidate
            return self.build_search_url(candidate)

        if scheme in ("about", SecurityConfig.INTERNAL_SCHEME) and " " not in candidate:
            return candidate

        if _DOMAIN_RE.match(candidate):
            return f"https://{candidate}"

        return self.build_search_url(candidate)

    def is_safe(self, url: Optional[str]) -> bool:
        return bool(url) and self.to_navigable_url(url) == url.strip()


class InputSanitizer:
    """Input sanitization utilities."""

    @staticmethod
    def sanitize_title(title: Optional[str], max_length: int = SecurityConfig.MAX_TITLE_LENGTH) -> str:
        """
        Strip control characters and surrounding whitespace from a display title.

        Args:
            title: Original title
            max_length: Maximum length kept

        Returns:
            Sanitized title, possibly empty
        """
        if not title:
            return ""
        sanitized = _CONTROL_CHARS_RE.sub("", title).strip()
        if len(sanitized) > max_length:
            sanitized = sanitized[:max_length]
        return sanitized

    @staticmethod
    def sanitize_folder_name(name: Optional[str]) -> str:
        return InputSanitizer.sanitize_title(name, SecurityConfig.MAX_FOLDER_NAME_LENGTH)
