"""
Minimal XML tree builder for floodcap.

Turns a nested dict/list tree into an ElementTree element:

- dict  -> child elements, keys starting with "@" become attributes
- list  -> repeated sibling elements with the same tag
- None  -> empty element
- other -> element text

Escaping of reserved characters is left to ElementTree.
"""

import re
from typing import Any, Mapping
from xml.etree.ElementTree import Element, SubElement, tostring

ATTRIBUTE_PREFIX = "@"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'

# XML 1.0 Char 범위 밖의 문자 (ElementTree는 이스케이프하지 않음)
_ILLEGAL_XML_CHARS = re.compile("[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")


def is_xml_text(value: str) -> bool:
    """XML 1.0 문서에 그대로 넣을 수 있는 문자열인지 확인합니다."""
    return _ILLEGAL_XML_CHARS.search(value) is None


def _text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _fill(element: Element, value: Any) -> None:
    if isinstance(value, Mapping):
        for key, child in value.items():
            if key.startswith(ATTRIBUTE_PREFIX):
                if child is not None:
                    element.set(key[len(ATTRIBUTE_PREFIX):], _text(child))
            else:
                _append(element, key, child)
    elif value is not None:
        element.text = _text(value)


def _append(parent: Element, tag: str, value: Any) -> None:
    if isinstance(value, (list, tuple)):
        for item in value:
            _append(parent, tag, item)
        return
    _fill(SubElement(parent, tag), value)


def build_element(tree: Mapping[str, Any]) -> Element:
    """
    단일 루트를 가진 트리로부터 Element를 생성합니다.

    Args:
        tree: {"루트태그": {...}} 형태의 딕셔너리

    Returns:
        루트 Element

    Raises:
        ValueError: 루트가 정확히 하나가 아닌 경우
    """
    if len(tree) != 1:
        raise ValueError(f"XML tree needs exactly one root element, got {len(tree)}")
    (tag, value), = tree.items()
    if isinstance(value, (list, tuple)):
        raise ValueError(f"Root element '{tag}' cannot be a list")
    root = Element(tag)
    _fill(root, value)
    return root


def to_xml(tree: Mapping[str, Any], declaration: bool = True) -> str:
    """트리를 XML 문자열로 직렬화합니다."""
    body = tostring(build_element(tree), encoding="unicode")
    return f"{XML_DECLARATION}{body}" if declaration else body
