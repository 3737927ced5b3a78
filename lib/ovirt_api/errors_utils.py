from __future__ import annotations

from xml.etree import ElementTree


def parse_fault(body: bytes | str | None) -> dict | None:
    """Extract reason/detail from an engine ``<fault>`` document."""
    if not body:
        return None
    try:
        root = ElementTree.fromstring(body)
    except ElementTree.ParseError:
        return None
    if root.tag != "fault":
        return None
    return {
        "reason": (root.findtext("reason") or "").strip(),
        "detail": (root.findtext("detail") or "").strip(),
    }


def format_fault(fault: dict | None) -> str | None:
    if not fault:
        return None
    parts = [p for p in (fault.get("reason"), fault.get("detail")) if p]
    return ": ".join(parts) or None
