"""Suggestion engine — free text to ranked candidate rules, plus templates."""

from whenthen.suggest.engine import ParseResult, Suggestion, SuggestionEngine
from whenthen.suggest.templates import TEMPLATES, Template, TemplateCategory, get_template

__all__ = [
    "ParseResult",
    "Suggestion",
    "SuggestionEngine",
    "TEMPLATES",
    "Template",
    "TemplateCategory",
    "get_template",
]
