#!/usr/bin/env python3
"""
generate_docset.py
==================
Generates a Dash docset for the Tailwind CSS documentation.

Mirrors https://tailwindcss.com/docs/ with wget, rewrites the pages for
offline use and packages them into a Dash-compatible .docset bundle with a
SQLite search index.

Usage
-----
    python -m tailwind_docset [options] [command]

Commands
--------
    fetch               Mirror the documentation and fetch the icon
    build               Build the docset (default); fetches first if needed
    dump                Print the index of a built docset
    diff                Compare the index and documents with a previous build
    clean               Delete all fetched and generated files

Options
-------
    --config FILE       Settings file (default: the bundled docset.yaml)
    --workdir DIR       Where the mirror, docset and versions live (default: .)
    -v, --verbose       Debug logging

Versions
--------
Every build is copied to ``versions/<version>-<revision>/`` together with a
``version.json``.  The revision starts at 0 for a new Tailwind CSS version and
is bumped whenever the site is redeployed (new Next.js build id) without a
version change.  Set ``BUILD_REVISION`` or pass ``--revision`` to override it.

Requirements
------------
    pip install requests beautifulsoup4 lxml pyyaml packaging brotli cairosvg
"""

import argparse
import difflib
import logging
import os
import plistlib
import shutil
import subprocess
import sys
import tarfile
from pathlib import Path
from typing import TextIO
from urllib.parse import urlsplit

from .config import COMMON_CSS, COMMON_JS, INDEX_RELPATH, PLIST_RELPATH, ROOT_RELPATH, Config
from .dedupe import Deduplicator
from .errors import DocsetError
from .fetch import fetch_icon, mirror_site
from .index import SearchIndex
from .sanity import sanity_check
from .transform import DocumentTransformer
from .urls import UrlResolver
from .version import (
    VERSION_FILE,
    DocsetVersion,
    all_versions,
    build_version_info,
    previous_version,
)

log = logging.getLogger(__name__)

# ── Constants ──────────────────────────────────────────────────────────────────
ASSETS_DIR = Path(__file__).with_name("assets")
ICON_FILE = "icon.png"
VERSIONS_DIR = "versions"

# Compiled Next.js chunks are not needed once scripts are stripped.
EXCLUDED_DIRS = ["_next/static/chunks"]


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)-8s %(message)s",
        datefmt="%H:%M:%S",
    )


# ── Docset scaffolding ─────────────────────────────────────────────────────────

def create_docset_dirs(docset_dir: Path) -> tuple[Path, Path, Path]:
    """Create ``Contents/``, ``Resources/``, ``Documents/`` and return all three."""
    documents = docset_dir / ROOT_RELPATH
    resources = documents.parent
    contents = resources.parent
    documents.mkdir(parents=True, exist_ok=True)
    return contents, resources, documents


def docs_subdir(config: Config) -> str:
    """Path of the docs below the site root: ``docs/``"""
    return urlsplit(config.docs_url).path.lstrip("/")


def write_info_plist(docset_dir: Path, config: Config) -> None:
    """Write the ``Info.plist`` required by Dash."""
    family = config.docs_host.split(".")[0]
    plist: dict = {
        "CFBundleIdentifier": family,
        "CFBundleName": config.docset_name,
        "DocSetPlatformFamily": family,
        "isDashDocset": True,
        "isJavaScriptEnabled": True,
        "dashIndexFilePath": docs_subdir(config) + "index.html",
        "DashDocSetFamily": "dashtoc",
        "DashDocSetFallbackURL": config.docs_url,
    }
    plist_path = docset_dir / PLIST_RELPATH
    with open(plist_path, "wb") as fh:
        plistlib.dump(plist, fh)
    log.debug("Wrote %s", plist_path)


def copy_common_assets(documents_dir: Path, config: Config) -> None:
    """Put ``common.css`` and ``common.js`` next to the docs pages."""
    dest = documents_dir / docs_subdir(config)
    dest.mkdir(parents=True, exist_ok=True)
    for name in (COMMON_CSS, COMMON_JS):
        shutil.copy2(ASSETS_DIR / name, dest / name)


# ── Indexing ───────────────────────────────────────────────────────────────────

def index_documents(documents_dir: Path, config: Config, index: SearchIndex) -> int:
    """Rewrite every page and stylesheet under *documents_dir*, filling *index*."""
    resolver = UrlResolver(documents_dir, config.host_url, config.asset_hosts)
    transformer = DocumentTransformer(documents_dir, config, resolver, index)

    log.info("Indexing documents")
    pages = 0
    for relpath in Deduplicator(documents_dir).unique_documents():
        transformer.transform(relpath)
        pages += 1

    for path in sorted(documents_dir.rglob("*.css")):
        if path.is_file():
            transformer.rewrite_stylesheet(path.relative_to(documents_dir))

    log.info("Indexed %d pages (%d entries)", pages, transformer.indexed)
    return transformer.indexed


# ── Packaging ──────────────────────────────────────────────────────────────────

def _exclude_ds_store(info: tarfile.TarInfo) -> tarfile.TarInfo | None:
    return None if Path(info.name).name == ".DS_Store" else info


def write_archive(docset_dir: Path, archive_path: Path) -> None:
    log.info("Creating archive: %s", archive_path)
    with tarfile.open(str(archive_path), "w:gz") as tar:
        tar.add(str(docset_dir), arcname=docset_dir.name, filter=_exclude_ds_store)
    size_mb = archive_path.stat().st_size / 1_000_000
    log.info("Archive created: %s (%.1f MB)", archive_path, size_mb)


def snapshot(docset_dir: Path, versions_dir: Path, version: DocsetVersion) -> Path:
    """Copy the docset to ``versions/<version>/`` for later diffs."""
    dest = versions_dir / version.docset_version / docset_dir.name
    if dest.exists():
        shutil.rmtree(dest)
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copytree(
        docset_dir, dest, symlinks=True, ignore=shutil.ignore_patterns(".DS_Store")
    )
    return dest


# ── Build ──────────────────────────────────────────────────────────────────────

def fetch(config: Config, workdir: Path, docs: bool = True, icon: bool = True) -> None:
    if docs:
        mirror_site(config, workdir)
    if icon:
        fetch_icon(config, workdir / ICON_FILE)


def build(
    config: Config,
    workdir: Path,
    revision: int | None = None,
    archive: bool = True,
) -> DocsetVersion:
    """Build the docset in *workdir* and return its version."""
    workdir = Path(workdir)
    docs_dir = workdir / config.docs_dir
    icon = workdir / ICON_FILE
    fetch(config, workdir, docs=not docs_dir.exists(), icon=not icon.exists())

    docset_dir = workdir / config.docset_dir_name
    archive_path = workdir / config.archive_name
    if docset_dir.exists():
        shutil.rmtree(docset_dir)
    archive_path.unlink(missing_ok=True)

    _, _, documents_dir = create_docset_dirs(docset_dir)
    write_info_plist(docset_dir, config)
    shutil.copy2(icon, docset_dir / ICON_FILE)

    shutil.copytree(docs_dir, documents_dir, symlinks=True, dirs_exist_ok=True)
    for excluded in EXCLUDED_DIRS:
        shutil.rmtree(documents_dir / excluded, ignore_errors=True)

    versions_dir = workdir / VERSIONS_DIR
    index_html = (docs_dir / docs_subdir(config) / "index.html").read_text(encoding="utf-8")
    version_info = build_version_info(
        index_html, all_versions(versions_dir, config.docset_dir_name), revision
    )
    log.info(
        "Generating docset for %s %s (%s)",
        config.docset_name,
        version_info.docset_version,
        version_info.build_id,
    )
    version_info.dump(docset_dir / VERSION_FILE)

    copy_common_assets(documents_dir, config)

    with SearchIndex.create(docset_dir / INDEX_RELPATH) as index:
        index_documents(documents_dir, config, index)
        sanity_check(index, config.sanity_check)

    if archive:
        write_archive(docset_dir, archive_path)

    snapshot(docset_dir, versions_dir, version_info)

    log.info(
        "Finished creating %s %s (%s)",
        docset_dir.name,
        version_info.docset_version,
        version_info.build_id,
    )
    return version_info


# ── Dump & diff ────────────────────────────────────────────────────────────────

def built_docset(config: Config, workdir: Path, version: str | None = None) -> Path:
    """The docset built last, or the snapshot of *version*."""
    if version:
        return Path(workdir) / VERSIONS_DIR / version / config.docset_dir_name
    return Path(workdir) / config.docset_dir_name


def previous_docset(config: Config, workdir: Path, current: Path, version: str | None = None) -> Path:
    if not version:
        version_file = current / VERSION_FILE
        if not version_file.is_file():
            raise DocsetError(f"{version_file} not found")
        known = all_versions(Path(workdir) / VERSIONS_DIR, config.docset_dir_name)
        version = previous_version(DocsetVersion.load(version_file), known).docset_version
    return built_docset(config, workdir, version)


def index_lines(docset_dir: Path) -> list[str]:
    db_path = docset_dir / INDEX_RELPATH
    if not db_path.is_file():
        raise DocsetError(f"Index not found: {db_path}")
    with SearchIndex(db_path) as index:
        return ["\t".join(row) + "\n" for row in index.rows()]


def dump_index(docset_dir: Path, out: TextIO) -> None:
    out.writelines(index_lines(docset_dir))
    out.flush()


def diff_index(old_docset: Path, new_docset: Path, out: TextIO) -> bool:
    """Write a unified diff of two indexes to *out*; return True if they differ."""
    diff = list(
        difflib.unified_diff(
            index_lines(old_docset),
            index_lines(new_docset),
            fromfile=str(old_docset),
            tofile=str(new_docset),
            n=3,
        )
    )
    out.writelines(diff)
    out.flush()
    return bool(diff)


def diff_docs(old_docset: Path, new_docset: Path) -> None:
    subprocess.run(
        [
            "diff", "-rNU3",
            "-x", "*.js",
            "-x", "*.css",
            "-x", "*.svg",
            str(old_docset / ROOT_RELPATH),
            str(new_docset / ROOT_RELPATH),
        ],
        check=False,
    )


def clean(config: Config, workdir: Path) -> None:
    """Delete all fetched files and generated files."""
    workdir = Path(workdir)
    for name in [
        str(config.docs_dir),
        *config.asset_hosts,
        ICON_FILE,
        config.docset_dir_name,
        config.archive_name,
        config.fetch_log,
    ]:
        path = workdir / name
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        elif path.exists() or path.is_symlink():
            path.unlink()
        else:
            continue
        log.info("Removed %s", path)


# ── Main ───────────────────────────────────────────────────────────────────────

def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="tailwind_docset",
        description="Generate a Dash docset for the Tailwind CSS documentation",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--config",
        metavar="FILE",
        type=Path,
        help="Settings file. Defaults to the bundled docset.yaml.",
    )
    parser.add_argument(
        "--workdir",
        metavar="DIR",
        type=Path,
        default=Path("."),
        help="Directory holding the mirror, the docset and versions/.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("fetch", help="Mirror the documentation and fetch the icon.")

    build_parser = sub.add_parser("build", help="Build the docset.")
    build_parser.add_argument(
        "--no-archive",
        action="store_true",
        help="Skip building the .tgz archive (useful for quick iteration).",
    )
    build_parser.add_argument(
        "--revision",
        type=int,
        metavar="N",
        default=int(os.environ["BUILD_REVISION"]) if os.environ.get("BUILD_REVISION") else None,
        help="Docset revision to use instead of the computed one (env: BUILD_REVISION).",
    )

    dump_parser = sub.add_parser("dump", help="Print the index of a built docset.")
    dump_parser.add_argument("--version", metavar="VERSION", help="Snapshot to dump, e.g. 4.1.0-0.")

    diff_parser = sub.add_parser("diff", help="Show differences from a previous build.")
    diff_parser.add_argument("--current", metavar="VERSION", help="Snapshot to compare (default: last build).")
    diff_parser.add_argument("--previous", metavar="VERSION", help="Snapshot to compare against.")
    diff_parser.add_argument("--index-only", action="store_true", help="Skip diffing the documents.")

    sub.add_parser("clean", help="Delete all fetched and generated files.")

    args = parser.parse_args(argv)
    if args.command is None:
        args = parser.parse_args([*(argv if argv is not None else sys.argv[1:]), "build"])
    return args


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose)
    config = Config.load(args.config)
    workdir = args.workdir.resolve()

    try:
        if args.command == "fetch":
            fetch(config, workdir)

        elif args.command == "build":
            build(config, workdir, revision=args.revision, archive=not args.no_archive)
            current = built_docset(config, workdir)
            try:
                old = previous_docset(config, workdir, current)
            except DocsetError as exc:
                log.info("Nothing to compare with: %s", exc)
            else:
                log.info("Diff in document indexes:")
                diff_index(old, current, sys.stdout)

        elif args.command == "dump":
            dump_index(built_docset(config, workdir, args.version), sys.stdout)

        elif args.command == "diff":
            current = built_docset(config, workdir, args.current)
            old = previous_docset(config, workdir, current, args.previous)
            log.info("Diff in document indexes:")
            diff_index(old, current, sys.stdout)
            if not args.index_only:
                log.info("Diff in document files:")
                diff_docs(old, current)

        elif args.command == "clean":
            clean(config, workdir)

    except DocsetError as exc:
        log.error("%s", exc)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
