"""
Docset versions.

A docset is published as ``<site version>-<revision>``.  The site version
alone is not enough: tailwindcss.com is redeployed (new Next.js ``buildId``)
without bumping the framework version, and each such redeploy that gets
packaged needs its own revision.
"""

import functools
import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from bs4 import BeautifulSoup
from packaging.version import Version

from .errors import VersionNotFoundError

log = logging.getLogger(__name__)

VERSION_FILE = "version.json"


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class DocsetVersion:
    """
    ``version`` is the site's version, ``build_id`` its deployment id and
    ``revision`` our counter within one version.  Only (version, revision)
    take part in comparisons.
    """

    version: str
    build_id: str
    revision: int = 0

    @property
    def parsed_version(self) -> Version:
        return Version(self.version)

    @property
    def compare_key(self) -> tuple[Version, int]:
        return self.parsed_version, self.revision

    @property
    def docset_version(self) -> str:
        return f"{self.version}-{self.revision}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DocsetVersion):
            return NotImplemented
        return self.compare_key == other.compare_key

    def __lt__(self, other: "DocsetVersion") -> bool:
        if not isinstance(other, DocsetVersion):
            return NotImplemented
        return self.compare_key < other.compare_key

    def __hash__(self) -> int:
        return hash(self.compare_key)

    def to_dict(self) -> dict:
        return {"version": self.version, "build_id": self.build_id, "revision": self.revision}

    @classmethod
    def parse(cls, text: str) -> "DocsetVersion":
        data = json.loads(text)
        return cls(version=data["version"], build_id=data["build_id"], revision=int(data["revision"]))

    @classmethod
    def load(cls, path: Path) -> "DocsetVersion":
        return cls.parse(Path(path).read_text(encoding="utf-8"))

    def dump(self, path: Path) -> None:
        Path(path).write_text(json.dumps(self.to_dict(), indent=2) + "\n", encoding="utf-8")


def next_revision(version: str, build_id: str, known: Iterable[DocsetVersion]) -> int:
    """
    Revision for a download of *version* deployed as *build_id*.

    Compared against the greatest known version not newer than *version*:
    a newer site version starts again at 0, the same deployment keeps its
    revision and a redeploy of the same version gets the next one.
    """
    downloaded = Version(version)
    candidates = [v for v in known if v.parsed_version <= downloaded]
    if not candidates:
        return 0

    latest = max(candidates)
    if latest.parsed_version < downloaded:
        return 0
    if latest.build_id == build_id:
        return latest.revision
    return latest.revision + 1


def read_site_version(html: str) -> tuple[str, str]:
    """Extract ``(version, build_id)`` from the mirrored docs index page."""
    soup = BeautifulSoup(html, "lxml")

    version = None
    header = soup.select_one(".sticky.top-0")
    if header is not None:
        for button in header.find_all("button"):
            match = re.match(r"v(\d[\d.]*)", button.get_text())
            if match:
                version = match.group(1).rstrip(".")
                break
    if version is None:
        raise VersionNotFoundError("site version not found")

    next_data = soup.find(id="__NEXT_DATA__")
    build_id = json.loads(next_data.get_text()).get("buildId") if next_data else None
    if not build_id:
        raise VersionNotFoundError("buildId not found")

    return version, build_id


def all_versions(versions_dir: Path, docset_dir_name: str) -> list[DocsetVersion]:
    """Every version snapshotted under *versions_dir*, oldest first."""
    files = Path(versions_dir).glob(f"*/{docset_dir_name}/{VERSION_FILE}")
    return sorted(DocsetVersion.load(path) for path in files)


def build_version_info(
    index_html: str,
    known: Iterable[DocsetVersion],
    revision: int | None = None,
) -> DocsetVersion:
    """Version of a fresh download, given the versions built before it."""
    version, build_id = read_site_version(index_html)
    if revision is None:
        revision = next_revision(version, build_id, known)
    else:
        log.info("Using revision %d as requested", revision)
    return DocsetVersion(version=version, build_id=build_id, revision=revision)


def previous_version(current: DocsetVersion, known: Iterable[DocsetVersion]) -> DocsetVersion:
    """The greatest of *known* that is lower than *current*."""
    older = [v for v in known if v < current]
    if not older:
        raise VersionNotFoundError("No previous version found")
    return max(older)
