"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
mnsclient, a product of Garudex Labs

XML helpers for the service's document format.

Documents use a single default namespace. Element lookups ignore the
namespace so replies with or without it decode the same way.
"""

import xml.etree.ElementTree as ET
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Type

from mnsclient.exceptions import ParseError

NAMESPACE = "http://mns.aliyuncs.com/doc/v1/"

# (attribute name, element name, value type)
FieldSpec = Tuple[str, str, Any]


def local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def new_document(root_tag: str) -> ET.Element:
    return ET.Element(root_tag, xmlns=NAMESPACE)


def to_bytes(root: ET.Element) -> bytes:
    # A literal CR in text is read back as LF
    return ET.tostring(root, encoding="utf-8", xml_declaration=True).replace(b"\r", b"&#13;")


def parse_document(body: bytes, status_code: Optional[int] = None) -> ET.Element:
    """
    Parse a reply body.

    Raises:
        ParseError: If the body is empty or not well-formed XML
    """
    if not body or not body.strip():
        raise ParseError("empty response body", status_code=status_code, body=body)
    try:
        return ET.fromstring(body)
    except ET.ParseError as e:
        raise ParseError(f"malformed XML in response: {e}", status_code=status_code, body=body) from e


def expect_root(root: ET.Element, tag: str, status_code: Optional[int] = None) -> ET.Element:
    if local_name(root.tag) != tag:
        raise ParseError(
            f"expected <{tag}> document, got <{local_name(root.tag)}>",
            status_code=status_code,
        )
    return root


def children(element: ET.Element, tag: str) -> List[ET.Element]:
    return [child for child in element if local_name(child.tag) == tag]


def child(element: ET.Element, tag: str) -> Optional[ET.Element]:
    for candidate in element:
        if local_name(candidate.tag) == tag:
            return candidate
    return None


def child_text(element: ET.Element, tag: str) -> Optional[str]:
    found = child(element, tag)
    if found is None:
        return None
    return found.text if found.text is not None else ""


def required_text(element: ET.Element, tag: str, status_code: Optional[int] = None) -> str:
    text = child_text(element, tag)
    if text is None:
        raise ParseError(
            f"<{local_name(element.tag)}> is missing required element <{tag}>",
            status_code=status_code,
        )
    return text


def format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def parse_value(text: str, kind: Any, tag: str) -> Any:
    """
    Convert element text to the declared type.

    Raises:
        ParseError: If the text does not fit the type
    """
    if kind is str:
        return text
    if kind is bool:
        lowered = text.strip().lower()
        if lowered not in ("true", "false"):
            raise ParseError(f"<{tag}> is not a boolean: {text!r}")
        return lowered == "true"
    if kind is int:
        try:
            return int(text.strip())
        except ValueError:
            raise ParseError(f"<{tag}> is not an integer: {text!r}") from None
    if isinstance(kind, type) and issubclass(kind, Enum):
        try:
            return kind(text.strip())
        except ValueError:
            raise ParseError(f"<{tag}> has unknown value {text!r}") from None
    raise TypeError(f"unsupported field type {kind!r}")


def write_fields(
    parent: ET.Element,
    obj: Any,
    fields: Sequence[FieldSpec],
    only: Optional[Iterable[str]] = None,
) -> None:
    """Append one element per non-None field of ``obj``."""
    allowed = set(only) if only is not None else None
    for attr, tag, _kind in fields:
        if allowed is not None and attr not in allowed:
            continue
        value = getattr(obj, attr)
        if value is None:
            continue
        ET.SubElement(parent, tag).text = format_value(value)


def read_fields(element: ET.Element, fields: Sequence[FieldSpec]) -> Dict[str, Any]:
    """Collect the fields present under ``element``; absent ones are skipped."""
    values: Dict[str, Any] = {}
    for attr, tag, kind in fields:
        text = child_text(element, tag)
        if text is None:
            continue
        values[attr] = parse_value(text, kind, tag)
    return values


def build(cls: Type, element: ET.Element, fields: Sequence[FieldSpec], **extra: Any) -> Any:
    values = read_fields(element, fields)
    values.update(extra)
    return cls(**values)
