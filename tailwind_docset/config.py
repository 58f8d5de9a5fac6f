"""Build settings, read from ``docset.yaml``."""

import dataclasses
from pathlib import Path
from urllib.parse import urljoin, urlsplit

import yaml

DEFAULT_CONFIG_PATH = Path(__file__).with_name("docset.yaml")

# Layout of a Dash docset bundle.
ROOT_RELPATH = Path("Contents/Resources/Documents")
INDEX_RELPATH = Path("Contents/Resources/docSet.dsidx")
PLIST_RELPATH = Path("Contents/Info.plist")

COMMON_CSS = "common.css"
COMMON_JS = "common.js"


@dataclasses.dataclass(frozen=True)
class Config:
    docset_name: str = "Tailwind CSS"
    docs_url: str = "https://tailwindcss.com/docs/"
    icon_site_url: str = "https://tailwindcss.com/brand"
    fetch_log: str = "wget.log"
    asset_hosts: tuple[str, ...] = ()
    reject_regex: str = ""
    sanity_check: dict[str, tuple[str, ...]] = dataclasses.field(default_factory=dict)

    @staticmethod
    def from_yaml(path: Path) -> "Config":
        with Path(path).open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        # missing or empty keys keep the field defaults
        kwargs = {
            field.name: data[field.name]
            for field in dataclasses.fields(Config)
            if data.get(field.name) is not None
        }
        if "asset_hosts" in kwargs:
            kwargs["asset_hosts"] = tuple(kwargs["asset_hosts"])
        if "sanity_check" in kwargs:
            kwargs["sanity_check"] = {
                entry_type: tuple(str(name) for name in names or ())
                for entry_type, names in kwargs["sanity_check"].items()
            }
        return Config(**kwargs)

    @staticmethod
    def load(path: Path | None = None) -> "Config":
        return Config.from_yaml(path or DEFAULT_CONFIG_PATH)

    # ── Derived names ─────────────────────────────────────────────────────────

    @property
    def docset_dir_name(self) -> str:
        """``Tailwind CSS`` → ``Tailwind_CSS.docset``"""
        return self.docset_name.replace(" ", "_") + ".docset"

    @property
    def archive_name(self) -> str:
        return self.docset_name.replace(" ", "_") + ".tgz"

    @property
    def docs_host(self) -> str:
        return urlsplit(self.docs_url).hostname

    @property
    def host_url(self) -> str:
        return urljoin(self.docs_url, "/")

    @property
    def docs_dir(self) -> Path:
        """Directory wget mirrors the site into."""
        return Path(self.docs_host)

    @property
    def common_css_url(self) -> str:
        return urljoin(self.docs_url, COMMON_CSS)

    @property
    def common_js_url(self) -> str:
        return urljoin(self.docs_url, COMMON_JS)
