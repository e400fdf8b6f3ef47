"""
Memo translation layer.

Pure, stateless mapping between MemoRecord and Notion's nested
page/property/block encoding.

Encode (write path):
  - title property   = first TITLE_MAX_LENGTH characters of content
  - tag property     = one multi-select option per tag, names verbatim
  - body             = one paragraph block holding the full content

Decode (read path):
  - content  = text of the first text-bearing child block
               (falls back to the truncated title if there is none)
  - tags     = option names of the multi-select property, in order
  - timestamps copied from the page metadata

Decode is total: a property or block with an unexpected shape is
treated as absent, never raised.
"""

from typing import Any, Dict, Iterable, List, Optional, Sequence

from memo.schemas import (
    MultiSelectProperty,
    RichTextProperty,
    RichTextRun,
    TitleProperty,
    parse_block_text,
    parse_page,
    parse_property,
)
from memo.types import MemoRecord

TITLE_MAX_LENGTH = 100
RICH_TEXT_MAX_LENGTH = 2000  # Notion limit per text run


# ============================================================================
# ENCODE
# ============================================================================

def derive_title(content: str) -> str:
    """Title is the first TITLE_MAX_LENGTH characters of content."""
    return content[:TITLE_MAX_LENGTH]


def _text_runs(text: str) -> List[Dict[str, Any]]:
    chunks = [
        text[start:start + RICH_TEXT_MAX_LENGTH]
        for start in range(0, len(text), RICH_TEXT_MAX_LENGTH)
    ] or [""]
    return [{"type": "text", "text": {"content": chunk}} for chunk in chunks]


def encode_tags(tags: Iterable[str]) -> Dict[str, Any]:
    """Multi-select property value; unknown names become new options upstream."""
    return {"multi_select": [{"name": tag} for tag in tags]}


def encode_title(content: str) -> Dict[str, Any]:
    """Title property value derived from content."""
    return {"title": _text_runs(derive_title(content))}


def encode_properties(
    title_property: str,
    tag_property: str,
    content: Optional[str] = None,
    tags: Optional[Sequence[str]] = None,
) -> Dict[str, Any]:
    """
    Build the page "properties" payload.

    Only the fields that are given are emitted, so the same function serves
    create (both) and partial update (either).
    """
    properties: Dict[str, Any] = {}
    if content is not None:
        properties[title_property] = encode_title(content)
    if tags is not None:
        properties[tag_property] = encode_tags(tags)
    return properties


def encode_content_block(content: str) -> Dict[str, Any]:
    """A single paragraph block holding the full, untruncated content."""
    return {
        "object": "block",
        "type": "paragraph",
        "paragraph": {
            "rich_text": _text_runs(content),
        },
    }


def encode_page_create(
    database_id: str,
    title_property: str,
    tag_property: str,
    content: str,
    tags: Sequence[str],
) -> Dict[str, Any]:
    """Full POST /pages body: properties and initial children in one request."""
    return {
        "parent": {"database_id": database_id},
        "properties": encode_properties(title_property, tag_property, content, tags),
        "children": [encode_content_block(content)],
    }


# ============================================================================
# DECODE
# ============================================================================

def _join(runs: Iterable[RichTextRun]) -> str:
    return "".join(run.value for run in runs)


def decode_title(properties: Dict[str, Any], title_property: str) -> Optional[str]:
    """Text of the title property, or None if absent or not a title."""
    prop = parse_property(properties.get(title_property))
    if isinstance(prop, TitleProperty):
        return _join(prop.title)
    if isinstance(prop, RichTextProperty):
        return _join(prop.rich_text)
    return None


def decode_tags(properties: Dict[str, Any], tag_property: str) -> List[str]:
    """Ordered option names of the tag property; empty if absent or malformed."""
    prop = parse_property(properties.get(tag_property))
    if isinstance(prop, MultiSelectProperty):
        return [option.name for option in prop.multi_select]
    return []


def decode_block_content(blocks: Optional[Iterable[Any]]) -> Optional[str]:
    """Text of the first text-bearing block, or None if there is none."""
    for raw in blocks or ():
        runs = parse_block_text(raw)
        if runs:
            return _join(runs)
    return None


def decode_content(
    properties: Dict[str, Any],
    blocks: Optional[Iterable[Any]],
    title_property: str,
) -> str:
    """
    Full content from the blocks, or the (possibly truncated) title.

    The title fallback is best-effort only.
    """
    content = decode_block_content(blocks)
    if content is not None:
        return content
    return decode_title(properties, title_property) or ""


def decode_page(
    page: Any,
    blocks: Optional[Iterable[Any]],
    title_property: str,
    tag_property: str,
) -> MemoRecord:
    """Build a MemoRecord from a page object and its separately fetched children."""
    parsed = parse_page(page)
    return MemoRecord(
        id=parsed.id,
        content=decode_content(parsed.properties, blocks, title_property),
        tags=decode_tags(parsed.properties, tag_property),
        created_at=parsed.created_time,
        updated_at=parsed.last_edited_time,
    )
