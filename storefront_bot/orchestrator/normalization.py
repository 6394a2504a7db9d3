"""Canonical size labels and product names."""
from __future__ import annotations

from typing import Dict, List, Optional

NOT_FOUND = "not_found"
"""Sentinel for a size or product the customer named but we could not map."""

SIZE_LABELS: Dict[str, str] = {
    "XS": "X-SMALL",
    "S": "SMALL",
    "M": "MEDIUM",
    "L": "LARGE",
    "XL": "EXTRA LARGE",
    "XXL": "EXTRA EXTRA LARGE",
}

_SIZE_ALIASES: Dict[str, str] = {
    "X-SMALL": "XS",
    "EXTRA SMALL": "XS",
    "XSMALL": "XS",
    "SMALL": "S",
    "PEQUEÑA": "S",
    "MEDIUM": "M",
    "MEDIANA": "M",
    "LARGE": "L",
    "GRANDE": "L",
    "EXTRA LARGE": "XL",
    "X-LARGE": "XL",
    "XLARGE": "XL",
    "EXTRA EXTRA LARGE": "XXL",
    "XX-LARGE": "XXL",
    "2XL": "XXL",
}


def normalize_size(raw: Optional[str]) -> str:
    """Map a size mention to its canonical label.

    "" stays "" (no size given); anything unmappable becomes NOT_FOUND.
    """
    text = " ".join((raw or "").strip().upper().split())
    if not text:
        return ""
    if text == NOT_FOUND.upper():
        return NOT_FOUND
    code = text if text in SIZE_LABELS else _SIZE_ALIASES.get(text)
    if code is None:
        return NOT_FOUND
    return SIZE_LABELS[code]


def size_code(label: str) -> Optional[str]:
    """Inverse of normalize_size: "MEDIUM" -> "M"."""
    for code, canonical in SIZE_LABELS.items():
        if canonical == label:
            return code
    return None


def match_product_name(candidate: str, active_products: List[str]) -> Optional[str]:
    """Match *candidate* to an active product title (exact → case-insensitive → substring)."""
    cand = candidate.strip()
    if not cand:
        return None
    if cand in active_products:
        return cand
    low = cand.lower()
    for title in active_products:
        if title.lower() == low:
            return title
    for title in active_products:
        if low in title.lower() or title.lower() in low:
            return title
    return None


def normalize_product_name(candidate: str, active_products: List[str]) -> str:
    """Canonical title, "" when nothing was named, NOT_FOUND when the catalogue has no match.

    Without a catalogue the candidate is returned unchanged.
    """
    cand = (candidate or "").strip()
    if not cand or cand == NOT_FOUND or not active_products:
        return cand
    return match_product_name(cand, active_products) or NOT_FOUND
