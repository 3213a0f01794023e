"""Enum variants shared by storage, schemas and the API.

String values are persisted and sent over the wire as-is.
"""
from enum import Enum


class FeynmanStep(str, Enum):
    """Four Feynman technique phases, declared in teaching order."""

    EXPLAIN = "explain"
    REVIEW = "review"
    SIMPLIFY = "simplify"
    ANALOGIZE = "analogize"


class CommunicationStyle(str, Enum):
    FORMAL = "formal"
    CASUAL = "casual"
    BALANCED = "balanced"


class MessageRole(str, Enum):
    USER = "user"
    AI = "ai"


class MaterialType(str, Enum):
    PDF = "pdf"
    TEXT = "text"
    DOCX = "docx"
    PPT = "ppt"


class GapStatus(str, Enum):
    """Coverage of a source concept in the teaching transcript."""

    NOT_COVERED = "not_covered"
    PARTIALLY_COVERED = "partially_covered"
    COVERED = "covered"


class Feedback(str, Enum):
    GOOD = "good"
    CONFUSED = "confused"
