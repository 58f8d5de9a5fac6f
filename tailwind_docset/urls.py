"""
Rewriting links and asset references for offline use.

A mirrored page refers to other pages and assets by site-absolute or relative
URLs.  ``UrlResolver.resolve`` turns each of them into something that works
from inside the docset:

- pages and assets present in the mirror become relative links
  (``/docs/installation`` → ``installation.html``),
- assets from the allow-listed external hosts point into the subdirectory the
  host was mirrored into (``https://images.unsplash.com/x?w=1`` →
  ``../images.unsplash.com/x%3Fw=1``),
- everything else is left pointing at the live web.
"""

import logging
import posixpath
import re
from pathlib import Path
from typing import Iterable
from urllib.parse import quote, urljoin, urlsplit, urlunsplit

from .errors import InvalidReferenceError

log = logging.getLogger(__name__)

WEB_SCHEMES = ("http", "https")

# Suffixes probed, in order, when looking for a local copy of a page.
FILE_SUFFIXES = ("", ".html")

# Characters that may not appear unescaped in a URI reference, and "%" not
# followed by two hex digits.
_BAD_REFERENCE = re.compile(r"%(?![0-9A-Fa-f]{2})|[^\x21-\x7e]|[<>\"{}|\\^`]")

# "?" and any "%" except the one in an already escaped "=".
_ASSET_PATH_ESCAPES = re.compile(r"\?|%(?!3D)")


def join_url(base: str, reference: str) -> str:
    """Resolve *reference* against *base*, raising ``InvalidReferenceError`` on bad syntax."""
    match = _BAD_REFERENCE.search(reference)
    if match:
        raise InvalidReferenceError(reference, f"unexpected {match.group()!r}")
    try:
        absolute = urljoin(base, reference)
        urlsplit(absolute).port
    except ValueError as exc:
        raise InvalidReferenceError(reference, str(exc)) from exc
    return absolute


def route_to(base: str, target: str) -> str:
    """
    Return a reference to *target* relative to the document at *base*.

    Targets on another scheme or host are returned as they are.
    """
    b = urlsplit(base)
    t = urlsplit(target)
    if (b.scheme.lower(), b.netloc.lower()) != (t.scheme.lower(), t.netloc.lower()):
        return target

    if (t.path or "/") == (b.path or "/") and (t.query or t.fragment):
        # same document: "#fragment", or "?query#fragment" when the query differs
        query = t.query if t.query != b.query else ""
        if query or t.fragment:
            return urlunsplit(("", "", "", query, t.fragment))

    base_dir = posixpath.dirname(b.path or "/")
    target_path = t.path or "/"
    rel = posixpath.relpath(target_path, base_dir)
    if target_path.endswith("/"):
        rel = "./" if rel == "." else rel + "/"
    if ":" in rel.split("/", 1)[0]:
        # would otherwise be read as a scheme
        rel = "./" + rel

    return urlunsplit(("", "", rel, t.query, t.fragment))


class UrlResolver:
    """
    Rewrites references found in documents under *root*.

    *host_url* is the site root (``https://tailwindcss.com/``); *root* is the
    local directory that mirrors it.  Bad references are reported once per
    resolver, so create one per build.
    """

    def __init__(self, root: Path, host_url: str, asset_hosts: Iterable[str] = ()) -> None:
        self.root = Path(root)
        self.host_url = host_url
        self.asset_hosts = frozenset(asset_hosts)
        self._host = urlsplit(host_url)
        self._warned: set[str] = set()

    def resolve(self, reference: str, base_url: str) -> str:
        try:
            absolute = join_url(base_url, reference)
        except InvalidReferenceError as exc:
            if reference.startswith("data:"):
                return reference
            if reference not in self._warned:
                self._warned.add(reference)
                log.warning("%s", exc)
            return reference

        parts = urlsplit(absolute)
        if parts.scheme not in WEB_SCHEMES:
            return reference

        if parts.hostname in self.asset_hosts:
            return route_to(base_url, self._asset_url(parts))

        if (parts.scheme, parts.netloc.lower()) != (self._host.scheme, self._host.netloc.lower()):
            return absolute

        path = parts.path[:-1] if parts.path.endswith("/") else parts.path
        localpath = path.lstrip("/")
        for suffix in FILE_SUFFIXES:
            candidate = localpath + suffix
            if candidate and (self.root / candidate).is_file():
                local = urlunsplit((parts.scheme, parts.netloc, path + suffix, parts.query, parts.fragment))
                return route_to(base_url, local)

        return absolute

    def _asset_url(self, parts) -> str:
        """Map an asset host URL onto the subdirectory the host was mirrored into."""
        request_uri = parts.path or "/"
        if parts.query:
            request_uri += "?" + parts.query
        path = _ASSET_PATH_ESCAPES.sub(
            lambda m: quote(m.group(), safe=""), f"/{parts.hostname}{request_uri}"
        )
        return urlunsplit((self._host.scheme, self._host.netloc, path, "", ""))
