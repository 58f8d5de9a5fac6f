"""
Fetching the site and the docset icon.

The documentation is mirrored with ``wget``, including the assets hosted on
the allow-listed external hosts, which are then moved into subdirectories of
the mirror so that ``UrlResolver`` can point at them.
"""

import logging
import os
import re
import shutil
import subprocess
from pathlib import Path
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup

from .config import Config
from .errors import DocsetError

log = logging.getLogger(__name__)

homebrew_lib_dir = "/opt/homebrew/lib"
existing_lib_path = os.environ.get("DYLD_FALLBACK_LIBRARY_PATH", "")
os.environ["DYLD_FALLBACK_LIBRARY_PATH"] = homebrew_lib_dir + ":" + existing_lib_path

ICON_WIDTH = 64

# HTTP headers that mimic a real browser
_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}

_DOCTYPE_HTML = re.compile(r"<!DOCTYPE html>", re.IGNORECASE)

# Pages that wget picked up from GitHub and Tailwind UI rather than the docs.
_FOREIGN_PAGE = re.compile(
    r"<link [^>]*\bhttps://github\.githubassets\.com\b|<meta [^>]*\bhttps://tailwindui\.com\b"
)


def mirror_site(config: Config, workdir: Path) -> None:
    """Mirror the documentation into ``<workdir>/<docs host>/``."""
    workdir = Path(workdir)
    log.info("Downloading %s", config.docs_url)

    # --mirror --no-parent -p: the docs and everything they need
    # --span-hosts --domains:  including assets on the allow-listed hosts
    cmd = [
        "wget",
        "-nv",
        "--mirror",
        "--no-parent",
        "-p",
        "--append-output", config.fetch_log,
        "--span-hosts",
        "--domains=" + ",".join([config.docs_host, *config.asset_hosts]),
    ]
    if config.reject_regex:
        cmd.append("--reject-regex=" + config.reject_regex)
    cmd.append(config.docs_url)

    try:
        subprocess.run(cmd, check=True, cwd=workdir)
    except subprocess.CalledProcessError as e:
        log.error("Error downloading documentation: %s (see %s)", e, workdir / config.fetch_log)
        raise
    except FileNotFoundError:
        log.error("wget not found. Please install wget:")
        log.error("  Ubuntu/Debian: sudo apt-get install wget")
        log.error("  macOS: brew install wget")
        raise

    docs_dir = workdir / config.docs_dir

    # external hosts as subdirectories
    for host in config.asset_hosts:
        src = workdir / host
        dest = docs_dir / host
        if dest.exists():
            shutil.rmtree(dest)
        if src.is_dir():
            shutil.copytree(src, dest)

    normalize_mirror(docs_dir)


def normalize_mirror(docs_dir: Path) -> None:
    """
    Give extension-less HTML pages a ``.html`` suffix and drop pages that do
    not belong to the documentation.
    """
    for path in sorted(Path(docs_dir).rglob("*")):
        if not path.is_file() or path.is_symlink():
            continue

        with open(path, "rb") as fh:
            head = fh.read(4096).decode("utf-8", errors="replace")

        if path.suffix == ".html":
            pass
        elif _DOCTYPE_HTML.search(head):
            with_suffix = path.with_name(path.name + ".html")
            if with_suffix.is_file():
                path.unlink()
                continue
            path.rename(with_suffix)
            path = with_suffix
        else:
            continue

        if _FOREIGN_PAGE.search(head):
            log.debug("Removing foreign page %s", path)
            path.unlink()


def fetch_icon(config: Config, dest: Path) -> None:
    """Download the Tailwind CSS mark from the brand page and save it as a PNG."""
    dest = Path(dest)
    log.info("Fetching icon from %s", config.icon_site_url)

    resp = requests.get(config.icon_site_url, headers=_HEADERS, timeout=30)
    resp.raise_for_status()
    soup = BeautifulSoup(resp.text, "lxml")

    image = None
    for a in soup.find_all("a", download=True):
        if "Download mark" in a.get_text():
            image = a.find("img", src=True)
            if image is not None:
                break
    if image is None:
        raise DocsetError(f"Icon not found at {config.icon_site_url}")

    svg = requests.get(urljoin(resp.url, image["src"]), headers=_HEADERS, timeout=30)
    svg.raise_for_status()

    # loads the cairo shared library
    import cairosvg

    try:
        cairosvg.svg2png(bytestring=svg.content, write_to=str(dest), output_width=ICON_WIDTH)
    except Exception:
        dest.unlink(missing_ok=True)
        raise
    log.info("Icon created at %s", dest)
