"""Render a repository's channel state as an IDE plugin repository descriptor.

Two shapes are supported:

- ``rich``: a ``plugin-repository`` document with one ``idea-plugin`` entry
  carrying the release details, vendor and compatibility range.
- ``minimal``: a ``plugins`` list with one ``plugin`` entry holding only the
  id, download URL and version, enough for update checks.

Both shapes are first built as nested dictionaries. JSON output dumps them
as-is; XML output maps the same keys to attributes or child elements, so the
two formats always carry the same fields and values.
"""

from __future__ import annotations

import json
import re
import xml.etree.ElementTree as ET
from typing import Any, Literal

from wrigi.errors import NotFound
from wrigi.models import CHANNELS, Catalog, Repository, Version

Shape = Literal["rich", "minimal"]

XML_HEADER = '<?xml version="1.0" encoding="UTF-8"?>\n'
CATEGORY = "Custom Languages"
IDEA_VERSION = {"min": "n/a", "max": "n/a", "since-build": "122.0"}

# Keys rendered as XML attributes, per element.
XML_ATTRIBUTES: dict[str, tuple[str, ...]] = {
    "category": ("name",),
    "idea-plugin": ("downloads", "size", "date", "url"),
    "vendor": ("email", "url"),
    "idea-version": ("min", "max", "since-build"),
    "plugin": ("id", "url", "version"),
}
# Key rendered as the element's own text.
XML_TEXT: dict[str, str] = {"vendor": "name"}
# Characters XML 1.0 cannot carry; replaced rather than dropped.
XML_ILLEGAL = re.compile("[^\t\n\r\u0020-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")

EMPTY_VERSION = Version(name="", url="", size=0, date=0, body="", download_count=0)


def find_repository(catalog: Catalog, org: str, repo: str, channel: str) -> Repository:
    """Look up ``org/repo`` for ``channel``.

    Only the first organization named ``org`` is searched.

    Raises:
        NotFound: If the organization, repository or channel is unknown.
    """
    if channel not in CHANNELS:
        raise NotFound(org, repo, channel)
    for organization in catalog:
        if organization.name != org:
            continue
        for repository in organization.repositories:
            if repository.name == repo:
                return repository
        break
    raise NotFound(org, repo, channel)


def rich_descriptor(org: str, repository: Repository, channel: str) -> dict[str, Any]:
    """Build the full plugin-repository document."""
    version = repository.versions.get(channel) or EMPTY_VERSION
    vendor = repository.vendor
    return {
        "plugin-repository": {
            "ff": f'"{CATEGORY}"',
            "category": {
                "name": CATEGORY,
                "idea-plugin": {
                    "downloads": version.download_count,
                    "size": version.size,
                    "date": version.date,
                    "url": f"https://github.com/{org}/{repository.name}",
                    "name": repository.plugin_name,
                    "id": f"{repository.id}.{channel}",
                    "description": repository.description,
                    "version": version.name,
                    "vendor": {"email": vendor.email, "url": vendor.url, "name": vendor.name},
                    "idea-version": dict(IDEA_VERSION),
                    "change-notes": version.body,
                    "downloadUrl": version.url,
                    "rating": 0,
                },
            },
        }
    }


def minimal_manifest(repository: Repository, channel: str) -> dict[str, Any]:
    """Build the update-check plugin list."""
    version = repository.versions.get(channel) or EMPTY_VERSION
    return {
        "plugins": {
            "plugin": [
                {
                    "id": f"{repository.id}.{channel}",
                    "url": version.url,
                    "version": version.name,
                }
            ]
        }
    }


def _xml_text(value: Any) -> str:
    return XML_ILLEGAL.sub("\ufffd", str(value))


def _build_element(tag: str, value: Any) -> ET.Element:
    element = ET.Element(tag)
    if not isinstance(value, dict):
        element.text = _xml_text(value)
        return element

    attributes = XML_ATTRIBUTES.get(tag, ())
    text_key = XML_TEXT.get(tag)
    for key, child in value.items():
        if key in attributes:
            element.set(key, _xml_text(child))
        elif key == text_key:
            element.text = _xml_text(child)
        elif isinstance(child, list):
            element.extend(_build_element(key, item) for item in child)
        else:
            element.append(_build_element(key, child))
    return element


def to_xml(document: dict[str, Any], declaration: bool = False) -> bytes:
    """Serialize a single-root document dictionary to indented XML."""
    ((tag, value),) = document.items()
    root = _build_element(tag, value)
    ET.indent(root, space="    ")
    text = ET.tostring(root, encoding="unicode")
    if declaration:
        text = XML_HEADER + text
    return text.encode("utf-8")


def to_json(document: dict[str, Any]) -> bytes:
    return json.dumps(document, indent=4).encode("utf-8")


def content_type(fmt: str) -> str:
    """Return the media type ``render`` produces for ``fmt``."""
    return "application/xml" if fmt == "xml" else "application/json"


def render(
    catalog: Catalog,
    org: str,
    repo: str,
    channel: str,
    fmt: str,
    shape: Shape = "rich",
) -> bytes:
    """Render the descriptor for one repository channel.

    ``fmt == "xml"`` gives XML, anything else gives JSON. A channel with no
    resolved release renders empty strings and zeros.

    Raises:
        NotFound: If the organization, repository or channel is unknown.
        ValueError: If ``shape`` is not ``rich`` or ``minimal``.
    """
    repository = find_repository(catalog, org, repo, channel)

    if shape == "rich":
        document = rich_descriptor(org, repository, channel)
    elif shape == "minimal":
        document = minimal_manifest(repository, channel)
    else:
        raise ValueError(f"Unknown descriptor shape: {shape}")

    if fmt == "xml":
        return to_xml(document, declaration=shape == "rich")
    return to_json(document)
