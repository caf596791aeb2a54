"""
Unit tests for metadata extractor.
"""

from baseline_engine.extractor import MetadataExtractor
from baseline_engine.models import BaselineKind


class TestMetaTagExtraction:
    """Tests for meta tag extraction."""

    def test_extract_basic_meta_tags(self):
        """Test extraction of name, property and charset meta tags."""
        html = """
        <html>
        <head>
            <meta charset="utf-8">
            <meta name="description" content="Online lessons">
            <meta property="og:title" content="Home page">
            <title>Home</title>
        </head>
        <body><p>Body</p></body>
        </html>
        """
        meta_tags = MetadataExtractor().extract_meta_tags(html)

        assert meta_tags["meta_charset"] == {"charset": "utf-8"}
        assert meta_tags["meta_description"] == {"name": "description", "content": "Online lessons"}
        assert meta_tags["meta_og_title"] == {"property": "og:title", "content": "Home page"}
        assert meta_tags["title"] == {"content": "Home"}

    def test_http_equiv_key(self):
        """Test that http-equiv is used when name and property are absent."""
        html = '<html><head><meta http-equiv="X-UA-Compatible" content="IE=edge"></head></html>'

        meta_tags = MetadataExtractor().extract_meta_tags(html)

        assert "meta_x_ua_compatible" in meta_tags
        assert meta_tags["meta_x_ua_compatible"]["content"] == "IE=edge"

    def test_fallback_key_uses_index(self):
        """Test that a tag without identifying attributes is keyed by position."""
        html = """
        <html><head>
            <meta name="robots" content="index">
            <meta itemprop="image" content="/a.png">
        </head></html>
        """
        meta_tags = MetadataExtractor().extract_meta_tags(html)

        assert meta_tags["meta_1"] == {"itemprop": "image", "content": "/a.png"}

    def test_name_takes_precedence_over_property(self):
        """Test key attribute precedence."""
        html = '<html><head><meta name="Twitter:Card" property="og:x" content="summary"></head></html>'

        meta_tags = MetadataExtractor().extract_meta_tags(html)

        assert list(meta_tags) == ["meta_twitter_card"]

    def test_body_meta_tags_ignored(self):
        """Test that only meta tags inside head are extracted."""
        html = """
        <html>
        <head><meta name="description" content="Head"></head>
        <body><div><meta itemprop="name" content="Body"></div></body>
        </html>
        """
        meta_tags = MetadataExtractor().extract_meta_tags(html)

        assert list(meta_tags) == ["meta_description"]

    def test_no_title(self):
        """Test that a page without a title has no title entry."""
        html = '<html><head><meta name="robots" content="noindex"></head></html>'

        assert "title" not in MetadataExtractor().extract_meta_tags(html)


class TestJsonLdExtraction:
    """Tests for JSON-LD extraction."""

    def test_extract_blocks_in_order(self):
        """Test that each JSON-LD script becomes an indexed block."""
        html = """
        <html><head>
            <script type="application/ld+json">{"@type": "Organization", "name": "Acme"}</script>
            <script>var ignored = 1;</script>
        </head><body>
            <script type="application/ld+json">[{"@type": "BreadcrumbList"}]</script>
        </body></html>
        """
        blocks = MetadataExtractor().extract_json_ld(html)

        assert blocks == [
            {"index": 0, "data": {"@type": "Organization", "name": "Acme"}},
            {"index": 1, "data": [{"@type": "BreadcrumbList"}]},
        ]

    def test_invalid_json_recorded_as_error(self):
        """Test that malformed blocks are kept with an error and raw content."""
        html = """
        <html><head>
            <script type="application/ld+json">{"@type": "Course",}</script>
        </head></html>
        """
        blocks = MetadataExtractor().extract_json_ld(html)

        assert len(blocks) == 1
        assert blocks[0]["index"] == 0
        assert blocks[0]["error"].startswith("Invalid JSON:")
        assert blocks[0]["rawContent"] == '{"@type": "Course",}'
        assert "data" not in blocks[0]

    def test_no_blocks(self):
        """Test a page without structured data."""
        assert MetadataExtractor().extract_json_ld("<html><body></body></html>") == []


class TestExtractDispatch:
    """Tests for kind-based dispatch."""

    def test_dispatch_by_kind(self):
        """Test that extract() selects the extraction for the kind."""
        html = """
        <html><head>
            <title>T</title>
            <script type="application/ld+json">{"a": 1}</script>
        </head></html>
        """
        extractor = MetadataExtractor()

        assert extractor.extract(html, BaselineKind.META_TAGS) == {"title": {"content": "T"}}
        assert extractor.extract(html, "json-ld") == [{"index": 0, "data": {"a": 1}}]
