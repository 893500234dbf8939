"""
Photo catalog.

Two series of five paintings: ``l1``-``l5`` and ``k1``-``k5``. Host labels
number the ``k`` series after the ``l`` series (``k1`` is 絵 6).

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-18
"""

from typing import Any, Dict, List, Optional

SERIES = {
    "l": {"prefix": "L", "group": "李鍾根さん", "label_offset": 0},
    "k": {"prefix": "K", "group": "兒玉光雄さん", "label_offset": 5},
}
SERIES_SIZE = 5
FALLBACK_URL = "/L_1.jpg"
FALLBACK_LABEL = "絵"


def _split(photo_id: str):
    """Split an id like 'k3' into ('k', 3); the number defaults to 1."""
    if not photo_id or photo_id[0] not in SERIES:
        return None, None
    try:
        n = int(photo_id[1:])
    except ValueError:
        n = 0
    return photo_id[0], n or 1


def url_for(photo_id: str) -> str:
    """Get the full-size image URL for a photo id."""
    series, n = _split(photo_id)
    if series is None:
        return FALLBACK_URL
    return f"/{SERIES[series]['prefix']}_{n}.jpg"


def label_for(photo_id: str) -> str:
    """Get the host display label for a photo id."""
    series, n = _split(photo_id)
    if series is None:
        return FALLBACK_LABEL
    return f"絵 {n + SERIES[series]['label_offset']}"


def default_catalog() -> List[Dict[str, Any]]:
    """Build the built-in catalog of both series."""
    photos = []
    for key, series in SERIES.items():
        for n in range(1, SERIES_SIZE + 1):
            photo_id = f"{key}{n}"
            photos.append({
                "id": photo_id,
                "url": url_for(photo_id),
                "thumbnail": f"/{series['prefix']}_{n}_L.png",
                "label": label_for(photo_id),
                "group": series["group"],
            })
    return photos


def load_catalog(config: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Get the configured catalog, falling back to the built-in one."""
    return config.get("photos") or default_catalog()


def find_photo(catalog: List[Dict[str, Any]], photo_id: str) -> Optional[Dict[str, Any]]:
    return next((p for p in catalog if p.get("id") == photo_id), None)
