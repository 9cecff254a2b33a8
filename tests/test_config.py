"""Tests for configuration module."""

from pathlib import Path

from supersale_preview import config
from supersale_preview.resolver import PrefixRule


def test_config_constants() -> None:
    """Test that all required configuration constants are defined."""
    assert config.APP_NAME == "SuperSALE Preview Server"
    assert config.APP_VERSION == "0.1.0"
    assert config.MAX_INCLUDE_DEPTH == 10
    assert config.SSI_EXTENSIONS == {".html", ".ssi"}


def test_config_paths() -> None:
    """Test that configuration paths are properly set."""
    assert isinstance(config.CONTENT_ROOT, Path)
    assert isinstance(config.TEMPLATES_DIR, Path)
    assert (config.TEMPLATES_DIR / "index.html").exists()


def test_mime_types() -> None:
    """Test that MIME types cover the asset types on campaign pages."""
    assert config.MIME_TYPES[".html"] == "text/html"
    assert config.MIME_TYPES[".css"] == "text/css"
    assert config.MIME_TYPES[".js"] == "application/javascript"
    assert config.MIME_TYPES[".svg"] == "image/svg+xml"
    assert config.DEFAULT_MIME_TYPE == "application/octet-stream"

    for ext in config.MIME_TYPES:
        assert ext.startswith(".")
        assert ext == ext.lower()


def test_page_aliases() -> None:
    """Test that bare campaign directories map to their entry documents."""
    assert config.PAGE_ALIASES["/9SS"] == "/9SS/index_sale.html"
    assert config.PAGE_ALIASES["/9SS/"] == "/9SS/index_sale.html"
    assert config.PAGE_ALIASES["/12SS"] == "/12SS/index_sale_trvmkt.html"
    assert config.PAGE_ALIASES["/12SS/"] == "/12SS/index_sale_trvmkt.html"


def test_build_prefix_rules(tmp_path: Path) -> None:
    """Test the built-in prefix rule table."""
    rules = config.build_prefix_rules(tmp_path)

    assert isinstance(rules, tuple)
    assert rules == (
        PrefixRule("/special/supersale/202509/", tmp_path / "9SS"),
        PrefixRule("/special/supersale/202512/", tmp_path / "12SS"),
        PrefixRule("/special/sales/template/html/", tmp_path),
    )


def test_build_prefix_rules_appends_extra_rules(tmp_path: Path) -> None:
    """Test that extra rules go after the built-in ones."""
    extra = PrefixRule("/special/supersale/202603/", tmp_path / "3SS")

    rules = config.build_prefix_rules(tmp_path, [extra])

    assert len(rules) == 4
    assert rules[-1] == extra
    assert rules[0].virtual_prefix == "/special/supersale/202509/"
