"""Replacing byte-identical HTML files with symlinks to a single copy."""

import hashlib
import logging
import os
from pathlib import Path
from typing import Iterator

log = logging.getLogger(__name__)


def file_digest(path: Path) -> str:
    sha1 = hashlib.sha1()
    with open(path, "rb") as fh:
        for chunk in iter(lambda: fh.read(65536), b""):
            sha1.update(chunk)
    return sha1.hexdigest()


def html_files(root: Path) -> list[Path]:
    """All regular ``*.html`` files under *root*, relative to it, in lexicographic order."""
    root = Path(root)
    paths = (
        path.relative_to(root)
        for path in root.rglob("*.html")
        if path.is_file() and not path.is_symlink()
    )
    return sorted(paths, key=lambda p: p.parts)


class Deduplicator:
    """
    Remembers the first file seen for every content hash.

    Files must be offered in a stable order so the same copy is kept on every
    run.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        self.canonical: dict[str, Path] = {}

    def claim(self, relpath: Path) -> bool:
        """
        Return True if *relpath* is the first file with its content.

        Otherwise the file is replaced by a relative symlink to the first one
        and False is returned.
        """
        relpath = Path(relpath)
        path = self.root / relpath
        digest = file_digest(path)

        existing = self.canonical.get(digest)
        if existing is None:
            self.canonical[digest] = relpath
            return True

        target = os.path.relpath(existing, relpath.parent)
        path.unlink()
        path.symlink_to(target)
        log.debug("Linked duplicate %s -> %s", relpath, target)
        return False

    def unique_documents(self) -> Iterator[Path]:
        """Yield the HTML files under the root that are not duplicates of an earlier one."""
        for relpath in html_files(self.root):
            if self.claim(relpath):
                yield relpath
