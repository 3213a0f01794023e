"""Material classification and text preparation helpers.

Pure functions -- no storage or network access.
"""
from app.domain.enums import MaterialType

_SUFFIX_TYPES: tuple[tuple[str, MaterialType], ...] = (
    (".pdf", MaterialType.PDF),
    (".docx", MaterialType.DOCX),
    (".pptx", MaterialType.PPT),
    (".ppt", MaterialType.PPT),
)


def classify_material_type(filename: str) -> MaterialType:
    """Classify an uploaded file by extension suffix; unknown suffixes are text.

    Uploaded content is never parsed structurally, so the type is informational.
    """
    lowered = filename.lower()
    for suffix, material_type in _SUFFIX_TYPES:
        if lowered.endswith(suffix):
            return material_type
    return MaterialType.TEXT


def decode_upload(content: bytes | str) -> str:
    """Read uploaded content as UTF-8 text, replacing undecodable bytes."""
    if isinstance(content, bytes):
        return content.decode("utf-8", errors="replace")
    return content


def format_transcript(messages, limit: int | None = None) -> str:
    """Render messages as ``role: content`` paragraphs, optionally truncated."""
    transcript = "\n\n".join(f"{_value(m.role)}: {m.content}" for m in messages)
    return transcript[:limit] if limit is not None else transcript


def combine_materials(materials, limit: int | None = None) -> str:
    """Concatenate material contents, optionally truncated."""
    combined = "\n\n".join(m.content for m in materials)
    return combined[:limit] if limit is not None else combined


def _value(role) -> str:
    return getattr(role, "value", role)
