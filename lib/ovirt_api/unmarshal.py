from __future__ import annotations

from typing import Any
from xml.etree import ElementTree

from .errors import ParseError


def unmarshal(data: bytes | str, model: Any = None) -> Any:
    """
    Parse an XML body into ``model``.

    Without a model the root element is returned. Nothing is returned on
    failure: malformed XML or a model that cannot map the document raises
    ``ParseError``.
    """
    try:
        root = ElementTree.fromstring(data)
    except ElementTree.ParseError as e:
        raise ParseError(f"malformed XML response: {e}") from e

    if model is None:
        return root

    factory = getattr(model, "from_xml", None)
    if factory is None:
        factory = model
    try:
        return factory(root)
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        name = getattr(model, "__name__", repr(model))
        raise ParseError(f"cannot map <{root.tag}> onto {name}: {e}") from e
