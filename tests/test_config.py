from pathlib import Path

from tailwind_docset.config import Config


def test_default_config():
    config = Config.load()

    assert config.docset_name == "Tailwind CSS"
    assert config.docs_url == "https://tailwindcss.com/docs/"
    assert config.asset_hosts == ("spotlight.tailwindui.com", "images.unsplash.com")
    assert "container" in config.sanity_check["Class"]
    assert "@tailwind" in config.sanity_check["Directive"]
    assert "clip: rect(0, 0, 0, 0)" in config.sanity_check["Property"]


def test_derived_names():
    config = Config(docset_name="Tailwind CSS", docs_url="https://tailwindcss.com/docs/")

    assert config.docset_dir_name == "Tailwind_CSS.docset"
    assert config.archive_name == "Tailwind_CSS.tgz"
    assert config.docs_host == "tailwindcss.com"
    assert config.host_url == "https://tailwindcss.com/"
    assert config.docs_dir == Path("tailwindcss.com")
    assert config.common_css_url == "https://tailwindcss.com/docs/common.css"
    assert config.common_js_url == "https://tailwindcss.com/docs/common.js"


def test_from_yaml_uses_defaults_for_missing_keys(tmp_path):
    path = tmp_path / "docset.yaml"
    path.write_text("docset_name: Tailwind\nsanity_check:\n  Class: [container]\n")

    config = Config.from_yaml(path)

    assert config.docset_name == "Tailwind"
    assert config.docs_url == "https://tailwindcss.com/docs/"
    assert config.asset_hosts == ()
    assert config.sanity_check == {"Class": ("container",)}


def test_from_yaml_matches_field_defaults(tmp_path):
    path = tmp_path / "docset.yaml"
    path.write_text("reject_regex:\nasset_hosts: [images.unsplash.com]\nunrelated: 1\n")

    config = Config.from_yaml(path)

    assert config == Config(asset_hosts=("images.unsplash.com",))

    path.write_text("")
    assert Config.from_yaml(path) == Config()
