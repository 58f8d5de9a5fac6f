"""
Turning mirrored tailwindcss.com pages into docset documents.

``DocumentTransformer.transform`` rewrites one HTML file in place and adds
its entries to the search index.

Actions performed
-----------------
1. Drop tracking ``<meta>``, every ``<script>`` and non-stylesheet ``<link>``.
2. Rewrite links and asset references through the ``UrlResolver``.
3. Remove the site chrome (top bar, floating footer, side navigation).
4. Inject ``common.css`` / ``common.js`` shared by all pages.
5. Show the whole class table instead of the collapsed "Show more" view.
6. Insert ``<a class="dashAnchor">`` anchors and index:

   - every heading as a ``Section``,
   - class tables as ``Class`` / ``Property``,
   - modifier tables as ``Modifier`` / ``Property``,
   - functions and directives as ``Function`` / ``Directive``,
   - classes and modifiers mentioned in the dark mode and state pages.
"""

import logging
import re
from pathlib import Path
from urllib.parse import quote, urljoin

import brotli
from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from .config import Config
from .errors import UnsupportedTableError
from .index import SearchIndex
from .tables import RowShape, classify_row, read_table
from .urls import UrlResolver, route_to

log = logging.getLogger(__name__)

URI_ATTRS = [
    ("a", "href"),
    ("img", "src"),
    ("link", "href"),
    ("script", "src"),
    ("iframe", "src"),
]

FUNCTIONS_AND_DIRECTIVES_PAGE = "docs/functions-and-directives.html"
STATE_PAGES = ("docs/dark-mode.html", "docs/hover-focus-and-other-states.html")

STICKY_HEADER_CLASS = "below-sticky-table-header"

# "padding-left: 1.25rem;" → ("padding-left: 1.25rem", "padding-left")
DECLARATION = re.compile(r"^\s*(([^\s:]+):\s+[^\n]+);", re.MULTILINE)

_SCROLL_MARGIN_CLASS = re.compile(r"(?:^|:)\[--scroll-mt:")
_PADDING_LEFT_CLASS = re.compile(r"(?:^|:)pl-")
_ARBITRARY_MODIFIER = re.compile(r"([-\w]+-)\[")

# Samples in the state pages: placeholders, "peer-{name} modifier", "dark class"
_PLACEHOLDER_SAMPLE = re.compile(r"\Atw-|(?:\A|:)bg-sky-700 ")
_MODIFIER_SAMPLE = re.compile(r"([-\w]+[-:/])(\{\w+\}|\*) ")
_CLASS_SAMPLE = re.compile(r"([-\w]+) class")

_CSS_URL = re.compile(r"""url\((['"]?)(.*?)\1\)""")


def dash_anchor_name(entry_type: str, name: str) -> str:
    # <a name="//apple_ref/cpp/Entry Type/Entry Name" class="dashAnchor"></a>
    return f"//apple_ref/cpp/{quote(entry_type, safe='')}/{quote(name, safe='')}"


def normalize_space(text: str) -> str:
    return " ".join(text.split())


def _text(node) -> str:
    if node is None or isinstance(node, Comment):
        return ""
    if isinstance(node, NavigableString):
        return str(node)
    return node.get_text()


def _following_text(node: Tag) -> str:
    """The first text node after the end of *node* in document order."""
    for el in node.next_elements:
        if not isinstance(el, NavigableString) or isinstance(el, Comment):
            continue
        if any(parent is node for parent in el.parents):
            continue
        return str(el)
    return ""


def _decompose_all(elements) -> None:
    for el in elements:
        # may already be gone with a removed ancestor
        if not el.decomposed:
            el.decompose()


def _remove_classes(tag: Tag, pattern: re.Pattern) -> None:
    classes = tag.get("class")
    if classes:
        tag["class"] = [c for c in classes if not pattern.search(c)]


class DocumentTransformer:
    """
    Rewrites the documents under *root* (the docset's ``Documents``
    directory) one at a time, recording entries in *index*.
    """

    def __init__(self, root: Path, config: Config, resolver: UrlResolver, index: SearchIndex) -> None:
        self.root = Path(root)
        self.config = config
        self.resolver = resolver
        self.index = index
        self.indexed = 0

    def document_url(self, relpath: str) -> str:
        """``docs/installation.html`` → ``https://tailwindcss.com/docs/installation``"""
        return urljoin(self.config.host_url, relpath.removesuffix(".html"))

    # ── Indexing ──────────────────────────────────────────────────────────────

    def index_item(self, soup: BeautifulSoup, path: str, node: Tag, entry_type: str, name: str) -> None:
        """Anchor *node* and record (*name*, *entry_type*) pointing at the anchor."""
        self.indexed += 1
        if self.indexed % 100 == 0:
            log.debug("Indexing %d items", self.indexed)

        anchor_name = dash_anchor_name(entry_type, name)
        anchor = soup.new_tag("a", attrs={"name": anchor_name, "class": "dashAnchor"})

        parent = None
        if node.name in ("table", "tr"):
            parent = node.find(["th", "td"])
        parent = parent or node

        for table in parent.find_parents("table"):
            if table.find("th", class_="sticky"):
                anchor["class"] = ["dashAnchor", STICKY_HEADER_CLASS]
                break

        parent.insert(0, anchor)
        self.index.insert(name, entry_type, f"{path}#{anchor_name}")

    # ── Documents ─────────────────────────────────────────────────────────────

    def transform(self, relpath: Path) -> int:
        """Rewrite the document at *relpath* and index it. Returns the number of entries added."""
        path = Path(relpath).as_posix()
        file = self.root / relpath
        url = self.document_url(path)
        before = self.indexed

        log.info("Indexing %s", path)
        soup = BeautifulSoup(file.read_bytes(), "lxml")

        html = soup.find("html")
        if html is not None:
            _remove_classes(html, _SCROLL_MARGIN_CLASS)
            html.insert(0, Comment(f" Online page at {url} "))

        self._strip(soup)
        self._rewrite_urls(soup, url)
        self._remove_chrome(soup)
        self._inject_assets(soup, url)
        self._expand_class_table(soup)

        for h in soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6"]):
            self.index_item(soup, path, h, "Section", normalize_space(h.get_text()))

        self._index_tables(soup, path)

        if path == FUNCTIONS_AND_DIRECTIVES_PAGE:
            self._index_functions_and_directives(soup, path)
        elif path in STATE_PAGES:
            self._index_state_samples(soup, path)

        file.write_text(str(soup), encoding="utf-8")
        return self.indexed - before

    def _strip(self, soup: BeautifulSoup) -> None:
        _decompose_all(
            meta for meta in soup.find_all("meta")
            if not meta.has_attr("charset") and meta.get("name") != "viewport"
        )
        _decompose_all(soup.find_all("script"))
        _decompose_all(link for link in soup.find_all("link") if link.get("rel") != ["stylesheet"])

    def _rewrite_urls(self, soup: BeautifulSoup, url: str) -> None:
        for tag, attr in URI_ATTRS:
            for el in soup.find_all(tag, attrs={attr: True}):
                el[attr] = self.resolver.resolve(el[attr], url)

    def _remove_chrome(self, soup: BeautifulSoup) -> None:
        _decompose_all(soup.select("#__next > .top-0, footer + .fixed.bottom-0"))

        for nav in soup.select(".fixed > #nav"):
            if nav.decomposed:
                continue
            container = nav.parent
            content = container.find_next_sibling()
            container.decompose()
            if content is not None:
                _remove_classes(content, _PADDING_LEFT_CLASS)

        # heading anchors
        _decompose_all(soup.select(".absolute.hidden"))

    def _inject_assets(self, soup: BeautifulSoup, url: str) -> None:
        head = soup.find("head")
        if head is None:
            head = soup.new_tag("head")
            (soup.find("html") or soup).insert(0, head)
        head.append(soup.new_tag("link", rel="stylesheet", href=route_to(url, self.config.common_css_url)))
        head.append(soup.new_tag("script", src=route_to(url, self.config.common_js_url)))

    def _expand_class_table(self, soup: BeautifulSoup) -> None:
        """Always show all classes."""
        table = soup.find(id="class-table")
        if table is None:
            return
        classes = [c for c in table.get("class", []) if c != "overflow-hidden"]
        table["class"] = classes + ["overflow-auto"]

        toggle = soup.select_one(r".pointer-events-none.lg\:hidden")
        if toggle is not None and any(
            normalize_space(button.get_text()).startswith("Show")
            for button in toggle.find_all("button")
        ):
            toggle.decompose()

    def _index_declarations(self, soup: BeautifulSoup, path: str, node: Tag, css: str) -> None:
        for declaration, prop in DECLARATION.findall(css):
            self.index_item(soup, path, node, "Property", prop)
            self.index_item(soup, path, node, "Property", declaration)

    def _index_tables(self, soup: BeautifulSoup, path: str) -> None:
        tables = [table for table in soup.find_all("table") if table.find("th")]
        for table in tables:
            for row, tr in read_table(table):
                shape = classify_row(row)

                if shape is RowShape.CLASS_DECLARATIONS:
                    self.index_item(soup, path, tr, "Class", row["class"].strip())
                    self._index_declarations(soup, path, tr, row["properties"])

                elif shape is RowShape.MODIFIER_CSS:
                    modifier = row["modifier"].strip()
                    match = _ARBITRARY_MODIFIER.match(modifier)
                    name = match.group(1) if match else f"{modifier}:"
                    self.index_item(soup, path, tr, "Modifier", name)
                    self._index_declarations(soup, path, tr, row["css"])

                elif shape is RowShape.UNSUPPORTED:
                    raise UnsupportedTableError(path, row)

    def _index_functions_and_directives(self, soup: BeautifulSoup, path: str) -> None:
        entry_type = None
        for el in soup.find_all(["h2", "h3"]):
            if el.name == "h2":
                title = el.get_text().strip()
                if title == "Directives":
                    entry_type = "Directive"
                elif title == "Functions":
                    entry_type = "Function"
            elif entry_type:
                self.index_item(soup, path, el, entry_type, el.get_text().strip())

    def _index_state_samples(self, soup: BeautifulSoup, path: str) -> None:
        """Pick up classes and modifiers that are only mentioned in prose."""
        codes = []
        for code in soup.find_all("code"):
            following = _following_text(code)
            if (following.startswith(" class") and not following.startswith(" classes")) or (
                "-*" in code.get_text() and following.startswith(" modifier")
            ):
                codes.append(code)

        for code in codes:
            sample = code.get_text() + _text(code.next_sibling)
            if _PLACEHOLDER_SAMPLE.search(sample):
                continue

            match = _MODIFIER_SAMPLE.match(sample)
            if match:
                entry_type, name = "Modifier", match.group(1)
            else:
                match = _CLASS_SAMPLE.match(sample)
                if not match:
                    continue
                entry_type, name = "Class", match.group(1)

            if self.index.count(path=path, type=entry_type, name=name) == 0:
                self.index_item(soup, path, code, entry_type, name)

    # ── Stylesheets ───────────────────────────────────────────────────────────

    def rewrite_stylesheet(self, relpath: Path) -> None:
        """Rewrite the ``url(...)`` references of the stylesheet at *relpath*."""
        path = Path(relpath).as_posix()
        file = self.root / relpath
        url = urljoin(self.config.host_url, path)

        data = file.read_bytes()
        try:
            content = data.decode("utf-8")
        except UnicodeDecodeError:
            log.info("Deflating %s with Brotli", path)
            content = brotli.decompress(data).decode("utf-8")

        def replace(match: re.Match) -> str:
            quote_char, href = match.groups()
            return f"url({quote_char}{self.resolver.resolve(href, url)}{quote_char})"

        file.write_text(_CSS_URL.sub(replace, content), encoding="utf-8")
