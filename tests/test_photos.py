"""
Tests for the photo catalog, comment validation and config defaults.

Run with: python -m pytest tests/test_photos.py
"""

import pytest
from fastapi import HTTPException

from logic.config import ensure_config_fields, get_default_config
from logic.photos import default_catalog, find_photo, label_for, load_catalog, url_for
from logic.validation import sanitise_comment_text, sanitise_percent


def test_url_for():
    assert url_for("l3") == "/L_3.jpg"
    assert url_for("k5") == "/K_5.jpg"
    assert url_for("k") == "/K_1.jpg"
    assert url_for("lx") == "/L_1.jpg"
    assert url_for("p1") == "/L_1.jpg"
    assert url_for("") == "/L_1.jpg"


def test_label_for():
    assert label_for("l2") == "絵 2"
    assert label_for("k1") == "絵 6"
    assert label_for("k5") == "絵 10"
    assert label_for("p1") == "絵"


def test_default_catalog():
    catalog = default_catalog()

    assert len(catalog) == 10
    assert find_photo(catalog, "l1")["group"] == "李鍾根さん"
    assert find_photo(catalog, "k3")["group"] == "兒玉光雄さん"
    assert find_photo(catalog, "x9") is None


def test_configured_catalog_wins():
    photos = [{"id": "p1", "url": "/P.jpg"}]
    assert load_catalog({"photos": photos}) == photos
    assert load_catalog({"photos": []}) == default_catalog()


def test_sanitise_comment_text():
    assert sanitise_comment_text("  hello\n") == "hello"
    assert sanitise_comment_text("line 1\nline 2") == "line 1\nline 2"

    for bad in ["", "   ", None, 42]:
        with pytest.raises(HTTPException):
            sanitise_comment_text(bad)
    with pytest.raises(HTTPException):
        sanitise_comment_text("abcdef", max_len=5)


def test_sanitise_percent():
    assert sanitise_percent("12.5") == 12.5
    assert sanitise_percent(150) == 150.0

    for bad in [True, "abc", None, float("nan"), float("inf")]:
        with pytest.raises(HTTPException):
            sanitise_percent(bad)


def test_ensure_config_fields():
    config = ensure_config_fields({"safe_band": {"min": 96, "max": 4}, "upsert_retry": {"attempts": 0}})

    assert config["safe_band"] == {"min": 4, "max": 96}
    assert config["upsert_retry"]["attempts"] == 1
    assert config["subscribe_retry"]["base_delay"] == 0.25
    assert config["default_photo"] == "l1"
    assert ensure_config_fields(get_default_config())["safe_band"] == {"min": 4.0, "max": 96.0}


def test_ensure_config_fields_bounds_band_to_canvas():
    config = ensure_config_fields({"safe_band": {"min": -20, "max": 150}})

    assert config["safe_band"] == {"min": 0.0, "max": 100.0}
