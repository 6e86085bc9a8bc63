"""Find CJK text in Vue components and scripts and replace it with i18n calls."""

from .classifier import Classification, classify
from .document import MemoryHighlighter, NullHighlighter, TextDocument
from .errors import ConfigurationError, I18nError, KeyFileError, TranslationError
from .models import EditResult, Entry, OffsetState, Position, Span, TextRange
from .registry import Registry
from .rewriter import RewriteReport, Rewriter, rewrite_document
from .scanner import Scanner, scan_document

__all__ = [
    "Classification",
    "ConfigurationError",
    "EditResult",
    "Entry",
    "I18nError",
    "KeyFileError",
    "MemoryHighlighter",
    "NullHighlighter",
    "OffsetState",
    "Position",
    "Registry",
    "RewriteReport",
    "Rewriter",
    "Scanner",
    "Span",
    "TextDocument",
    "TextRange",
    "TranslationError",
    "classify",
    "rewrite_document",
    "scan_document",
]
