"""
Notion Wire Schemas - Pydantic Models

PURE DATA MODELS - NO LOGIC
Only describes the parts of the Notion page/property/block payloads
that the translation layer reads.

Notion's payloads are loosely typed: every property and block carries a
"type" tag and nests its value under a key of the same name. Properties are
modelled as a discriminated union on that tag. Anything that fails to
validate is treated as absent by the parse_* helpers.

ref: https://developers.notion.com/reference/page-property-values
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError


# ============================================================================
# RICH TEXT
# ============================================================================

class TextContent(BaseModel):
    """The {"content": "..."} object inside a text run."""
    content: str = ""


class RichTextRun(BaseModel):
    """
    One run of rich text.

    Responses carry plain_text; request payloads only carry text.content.
    """
    type: str = "text"
    plain_text: Optional[str] = None
    text: Optional[TextContent] = None

    class Config:
        extra = "allow"  # annotations, href, mention, ...

    @property
    def value(self) -> str:
        if self.plain_text is not None:
            return self.plain_text
        if self.text is not None:
            return self.text.content
        return ""


class SelectOption(BaseModel):
    """A single multi-select option."""
    name: str
    id: Optional[str] = None
    color: Optional[str] = None


# ============================================================================
# PAGE PROPERTIES (DISCRIMINATED ON "type")
# ============================================================================

class TitleProperty(BaseModel):
    type: Literal["title"]
    title: List[RichTextRun]


class RichTextProperty(BaseModel):
    type: Literal["rich_text"]
    rich_text: List[RichTextRun]


class MultiSelectProperty(BaseModel):
    type: Literal["multi_select"]
    multi_select: List[SelectOption]


PageProperty = Annotated[
    Union[TitleProperty, RichTextProperty, MultiSelectProperty],
    Field(discriminator="type"),
]

KNOWN_PROPERTY_TYPES = ("title", "rich_text", "multi_select")

_property_adapter = TypeAdapter(PageProperty)


# ============================================================================
# PAGES, BLOCKS, LIST RESPONSES
# ============================================================================

class Page(BaseModel):
    """A Notion page object (database row)."""
    id: str = ""
    created_time: Optional[str] = None
    last_edited_time: Optional[str] = None
    archived: bool = False
    properties: Dict[str, Any] = Field(default_factory=dict)

    class Config:
        extra = "allow"  # parent, url, icon, cover, ...


class TextBlockBody(BaseModel):
    """The type-specific body of a text-bearing block."""
    rich_text: List[RichTextRun]

    class Config:
        extra = "allow"  # color, children, checked, language, ...


class Block(BaseModel):
    """A Notion block object. The body lives under the key named by type."""
    id: Optional[str] = None
    type: str

    class Config:
        extra = "allow"


class ListResponse(BaseModel):
    """Paginated list envelope used by database queries and block children."""
    results: List[Any] = Field(default_factory=list)
    has_more: bool = False
    next_cursor: Optional[str] = None

    class Config:
        extra = "allow"


# ============================================================================
# DEFENSIVE PARSERS (NEVER RAISE)
# ============================================================================

def parse_property(raw: Any) -> Optional[Union[TitleProperty, RichTextProperty, MultiSelectProperty]]:
    """
    Parse one property value, or return None if it is absent or malformed.

    Request-shaped payloads omit "type"; it is inferred from the single
    known value key when possible.
    """
    if not isinstance(raw, dict):
        return None

    if "type" not in raw:
        kinds = [kind for kind in KNOWN_PROPERTY_TYPES if kind in raw]
        if len(kinds) != 1:
            return None
        raw = {**raw, "type": kinds[0]}

    try:
        return _property_adapter.validate_python(raw)
    except ValidationError:
        return None


def parse_page(raw: Any) -> Page:
    """Parse a page object; malformed fields fall back to defaults."""
    if not isinstance(raw, dict):
        return Page()

    try:
        return Page.model_validate(raw)
    except ValidationError:
        pass

    def _str_or_none(value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None

    properties = raw.get("properties")
    return Page(
        id=raw.get("id") if isinstance(raw.get("id"), str) else "",
        created_time=_str_or_none(raw.get("created_time")),
        last_edited_time=_str_or_none(raw.get("last_edited_time")),
        archived=raw.get("archived") is True,
        properties=properties if isinstance(properties, dict) else {},
    )


def parse_block_text(raw: Any) -> Optional[List[RichTextRun]]:
    """
    Return the rich text runs of a text-bearing block.

    Returns None for non-text blocks (images, dividers, child pages, ...)
    and for malformed ones.
    """
    if not isinstance(raw, dict):
        return None

    try:
        block = Block.model_validate(raw)
        body = (block.model_extra or {}).get(block.type)
        if not isinstance(body, dict):
            return None
        return TextBlockBody.model_validate(body).rich_text
    except ValidationError:
        return None


def parse_list_response(raw: Any) -> ListResponse:
    """Parse a paginated list envelope; malformed input yields an empty list."""
    if not isinstance(raw, dict):
        return ListResponse()
    try:
        return ListResponse.model_validate(raw)
    except ValidationError:
        return ListResponse()
