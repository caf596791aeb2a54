"""
Metadata extractor for parsing HTML into baseline-comparable values.

Extracts the meta tags of a page's head and its JSON-LD structured-data blocks.
"""

import json
import logging
import re
from typing import Any

from bs4 import BeautifulSoup
from bs4.element import Tag

from .models import BaselineKind

logger = logging.getLogger(__name__)


class MetadataExtractor:
    """
    Extracts SEO metadata from HTML.

    Meta tags become a flat map keyed by the tag's identifying attribute;
    JSON-LD scripts become an ordered list of parsed blocks.
    """

    # Attributes tried in order to build a meta tag key
    KEY_ATTRIBUTES = ["name", "property", "http-equiv"]

    JSON_LD_SELECTOR = 'script[type="application/ld+json"]'

    def extract(self, html: str, kind: BaselineKind | str) -> Any:
        """
        Extract the value for a baseline kind.

        Args:
            html: HTML string to parse
            kind: Baseline kind selecting the extraction

        Returns:
            Meta tag map for meta-tags, list of blocks for json-ld
        """
        kind = BaselineKind.parse(kind)
        if kind == BaselineKind.JSON_LD:
            return self.extract_json_ld(html)
        return self.extract_meta_tags(html)

    def extract_meta_tags(self, html: str) -> dict[str, dict[str, str]]:
        """
        Extract all meta tags from the head section.

        Args:
            html: HTML string to parse

        Returns:
            Map of tag key -> all attributes of the tag (plus `content`).
            The page title is stored as {"title": {"content": ...}}.
        """
        soup = BeautifulSoup(html, "lxml")
        head = soup.head
        meta_tags: dict[str, dict[str, str]] = {}

        if head is None:
            return meta_tags

        for index, meta in enumerate(head.find_all("meta")):
            key = self._meta_key(meta, index)

            meta_info = {name: self._attribute_value(value) for name, value in meta.attrs.items()}
            if meta.get("content"):
                meta_info["content"] = self._attribute_value(meta["content"])

            meta_tags[key] = meta_info

        title = head.find("title")
        if title is not None:
            meta_tags["title"] = {"content": title.get_text()}

        return meta_tags

    def extract_json_ld(self, html: str) -> list[dict[str, Any]]:
        """
        Extract JSON-LD structured data blocks in document order.

        Blocks that fail to parse are recorded with an error and their raw
        content instead of being dropped.

        Args:
            html: HTML string to parse

        Returns:
            List of {"index", "data"} or {"index", "error", "rawContent"}
        """
        soup = BeautifulSoup(html, "lxml")
        structured_data: list[dict[str, Any]] = []

        for index, script in enumerate(soup.select(self.JSON_LD_SELECTOR)):
            raw_content = script.string if script.string is not None else script.get_text()
            try:
                structured_data.append({"index": index, "data": json.loads(raw_content)})
            except json.JSONDecodeError as e:
                logger.warning("Invalid JSON-LD block at index %d: %s", index, e)
                structured_data.append(
                    {
                        "index": index,
                        "error": f"Invalid JSON: {e}",
                        "rawContent": raw_content,
                    }
                )

        return structured_data

    def _meta_key(self, meta: Tag, index: int) -> str:
        """
        Build a stable key for a meta tag.

        Args:
            meta: The <meta> element
            index: Position of the tag within the head

        Returns:
            Lower-cased key with non-alphanumeric characters replaced by '_'
        """
        key = f"meta_{index}"

        for attribute in self.KEY_ATTRIBUTES:
            if meta.get(attribute):
                key = f"meta_{self._attribute_value(meta[attribute])}"
                break
        else:
            if meta.get("charset"):
                key = "meta_charset"

        return re.sub(r"[^a-zA-Z0-9_]", "_", key).lower()

    def _attribute_value(self, value: Any) -> str:
        # Multi-valued attributes come back as lists from BeautifulSoup
        if isinstance(value, list):
            return " ".join(value)
        return value
