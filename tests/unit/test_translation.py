"""
Tests for the memo translation layer.

Covers:
1. Encode: title derivation, tag options, content block, partial properties
2. Decode: block preferred over title, title fallback, tags, timestamps
3. Round trip: encode -> decode recovers content and tags
4. Totality: malformed properties and blocks are treated as absent
"""

import pytest

from memo.translation import (
    RICH_TEXT_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    decode_block_content,
    decode_content,
    decode_page,
    decode_tags,
    decode_title,
    derive_title,
    encode_content_block,
    encode_page_create,
    encode_properties,
)
from notion_fakes import make_page, make_paragraph


def _request_shaped_page(content, tags, page_id="page-1"):
    """Build a page from our own encoded properties (no plain_text, no type)."""
    return {
        "id": page_id,
        "created_time": "2024-01-01T00:00:00.000Z",
        "last_edited_time": "2024-01-02T00:00:00.000Z",
        "properties": encode_properties("Content", "Tags", content, tags),
    }


# ─────────────────────────────────────────────────────
# ENCODE
# ─────────────────────────────────────────────────────

class TestEncode:
    """Encoding a memo into Notion payloads."""

    def test_title_truncated_to_limit(self):
        """Title is the first 100 characters of content."""
        content = "x" * 250
        assert derive_title(content) == "x" * TITLE_MAX_LENGTH

    def test_short_content_title_unchanged(self):
        """Content shorter than the limit is used as-is, not padded."""
        assert derive_title("Hello world") == "Hello world"

    def test_title_counts_characters_not_bytes(self):
        """Multi-byte characters count as one each."""
        content = "测" * 150
        assert derive_title(content) == "测" * 100

    def test_tags_become_named_options(self):
        """Each tag becomes one multi-select option, verbatim."""
        properties = encode_properties("Content", "Tags", tags=["a", "B b", "a"])
        assert properties == {
            "Tags": {"multi_select": [{"name": "a"}, {"name": "B b"}, {"name": "a"}]}
        }

    def test_empty_tags_encoded_as_empty_list(self):
        """Empty tag list clears the property."""
        properties = encode_properties("Content", "Tags", tags=[])
        assert properties["Tags"] == {"multi_select": []}

    def test_only_given_fields_emitted(self):
        """Content-only update does not touch tags and vice versa."""
        assert set(encode_properties("Content", "Tags", content="hi")) == {"Content"}
        assert set(encode_properties("Content", "Tags", tags=["a"])) == {"Tags"}
        assert encode_properties("Content", "Tags") == {}

    def test_content_block_holds_full_content(self):
        """Body block is a paragraph with the untruncated content."""
        content = "y" * 150
        block = encode_content_block(content)
        assert block["type"] == "paragraph"
        runs = block["paragraph"]["rich_text"]
        assert "".join(r["text"]["content"] for r in runs) == content

    def test_long_content_split_into_runs(self):
        """Content over the per-run limit is split inside one block."""
        content = "z" * (RICH_TEXT_MAX_LENGTH * 2 + 5)
        runs = encode_content_block(content)["paragraph"]["rich_text"]
        assert len(runs) == 3
        assert all(len(r["text"]["content"]) <= RICH_TEXT_MAX_LENGTH for r in runs)
        assert "".join(r["text"]["content"] for r in runs) == content

    def test_page_create_combines_properties_and_children(self):
        """Create payload carries parent, properties and body together."""
        payload = encode_page_create("db-1", "Content", "Tags", "Hello", ["a"])
        assert payload["parent"] == {"database_id": "db-1"}
        assert set(payload["properties"]) == {"Content", "Tags"}
        assert len(payload["children"]) == 1


# ─────────────────────────────────────────────────────
# DECODE
# ─────────────────────────────────────────────────────

class TestDecode:
    """Decoding Notion payloads into a MemoRecord."""

    def test_block_preferred_over_title(self):
        """Full content comes from the block, not the truncated title."""
        full = "a" * 300
        page = make_page("p1", title=full[:100], tags=["t"])
        memo = decode_page(page, [make_paragraph(full)], "Content", "Tags")
        assert memo.content == full

    def test_title_fallback_without_blocks(self):
        """No blocks: content falls back to the title text."""
        page = make_page("p1", title="Short title")
        memo = decode_page(page, [], "Content", "Tags")
        assert memo.content == "Short title"

    def test_first_text_block_wins(self):
        """Non-text and empty blocks are skipped; first text block is used."""
        blocks = [
            {"object": "block", "id": "d", "type": "divider", "divider": {}},
            {"object": "block", "id": "e", "type": "paragraph", "paragraph": {"rich_text": []}},
            make_paragraph("first", "b1"),
            make_paragraph("second", "b2"),
        ]
        assert decode_block_content(blocks) == "first"

    def test_heading_counts_as_text_block(self):
        """Any block type with rich_text is text-bearing."""
        block = {
            "object": "block",
            "id": "h",
            "type": "heading_2",
            "heading_2": {"rich_text": [{"type": "text", "plain_text": "Heading"}]},
        }
        assert decode_block_content([block]) == "Heading"

    def test_runs_concatenated(self):
        """All runs of the chosen block are joined."""
        block = {
            "type": "paragraph",
            "paragraph": {
                "rich_text": [
                    {"type": "text", "plain_text": "Hello "},
                    {"type": "text", "plain_text": "world"},
                ]
            },
        }
        assert decode_block_content([block]) == "Hello world"

    def test_tags_preserve_order(self):
        """Tags come back in property order."""
        page = make_page("p1", tags=["z", "a", "m"])
        assert decode_page(page, [], "Content", "Tags").tags == ["z", "a", "m"]

    def test_timestamps_copied(self):
        """created/updated come from page metadata."""
        page = make_page("p1", created="2023-01-01T00:00:00.000Z", edited="2023-01-02T00:00:00.000Z")
        memo = decode_page(page, [], "Content", "Tags")
        assert memo.created_at == "2023-01-01T00:00:00.000Z"
        assert memo.updated_at == "2023-01-02T00:00:00.000Z"
        assert memo.id == "p1"

    def test_custom_property_names(self):
        """Configured property names are honoured."""
        page = make_page("p1", title="T", tags=["x"], title_property="Name", tag_property="Labels")
        memo = decode_page(page, [], "Name", "Labels")
        assert memo.content == "T"
        assert memo.tags == ["x"]


# ─────────────────────────────────────────────────────
# ROUND TRIP
# ─────────────────────────────────────────────────────

class TestRoundTrip:
    """encode -> decode."""

    @pytest.mark.parametrize(
        "content",
        ["Hello world", "", "x" * 100, "x" * 101, "多语言内容 " * 40, "a" * 4500],
    )
    def test_content_recovered_through_block(self, content):
        """The block carries the exact content regardless of length."""
        page = _request_shaped_page(content, [])
        block = encode_content_block(content)
        assert decode_page(page, [block], "Content", "Tags").content == content

    @pytest.mark.parametrize("tags", [[], ["a"], ["a", "b"], ["b", "a", "Case", "with space"]])
    def test_tags_recovered(self, tags):
        """Tag names survive the round trip in order."""
        page = _request_shaped_page("c", tags)
        assert decode_page(page, [], "Content", "Tags").tags == tags


# ─────────────────────────────────────────────────────
# TOTALITY
# ─────────────────────────────────────────────────────

class TestDecodeTotality:
    """Malformed input degrades to defaults; decode never raises."""

    def test_missing_properties(self):
        """Page without properties decodes to empty content and tags."""
        memo = decode_page({"id": "p1"}, None, "Content", "Tags")
        assert memo.content == ""
        assert memo.tags == []

    def test_tag_property_wrong_type(self):
        """A tag property that is not multi_select is treated as absent."""
        properties = {"Tags": {"type": "select", "select": {"name": "a"}}}
        assert decode_tags(properties, "Tags") == []

    def test_tag_property_wrong_shape(self):
        """multi_select that is not a list is treated as absent."""
        properties = {"Tags": {"type": "multi_select", "multi_select": "a,b"}}
        assert decode_tags(properties, "Tags") == []

    def test_title_property_not_a_dict(self):
        """Garbage title property yields no title."""
        assert decode_title({"Content": "plain string"}, "Content") is None

    def test_rich_text_title_accepted(self):
        """A rich_text property configured as the title still decodes."""
        properties = {"Content": {"type": "rich_text", "rich_text": [{"plain_text": "hi"}]}}
        assert decode_title(properties, "Content") == "hi"

    def test_malformed_blocks_skipped(self):
        """Blocks with the wrong shape are skipped, not raised."""
        blocks = [
            "not a block",
            {"type": "paragraph"},
            {"type": "paragraph", "paragraph": {"rich_text": "nope"}},
            {"no_type": True},
            make_paragraph("ok"),
        ]
        assert decode_block_content(blocks) == "ok"

    def test_malformed_page_metadata(self):
        """Wrong-typed metadata falls back to defaults but keeps good fields."""
        page = make_page("p1", title="T", tags=["a"])
        page["created_time"] = 12345
        memo = decode_page(page, [], "Content", "Tags")
        assert memo.id == "p1"
        assert memo.created_at is None
        assert memo.tags == ["a"]

    def test_non_dict_page(self):
        """A non-object page decodes to an empty record."""
        memo = decode_page(None, None, "Content", "Tags")
        assert memo.id == ""
        assert memo.content == ""

    def test_decode_content_with_no_sources(self):
        """No blocks and no title gives empty content."""
        assert decode_content({}, [], "Content") == ""
