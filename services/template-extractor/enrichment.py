"""Attach context windows and default validation rules to extracted fields."""

import logging

from config import settings
from context import ContextResolver, format_full_context
from models import TemplateField

logger = logging.getLogger(__name__)

DEFAULT_RULE = "must not be empty"

# Keyed by lower-cased field type
DEFAULT_VALIDATION_RULES: dict[str, list[str]] = {
    "date": ["must be a valid date", "must be in format DD Month, YYYY"],
    "email": ["must be a valid email address", "must contain @ symbol"],
    "phone": ["must include country code", "must be in international format"],
    "name": ["must not be empty", "should not contain numbers"],
    "address": ["must include street address", "should include ZIP/postal code"],
    "amount": ["must be a valid number", "should include currency symbol"],
}


def default_validation_rules(field_type: str) -> list[str]:
    """Fixed rules for a field type; unknown types only require a value."""
    rules = DEFAULT_VALIDATION_RULES.get((field_type or "").strip().lower())
    return list(rules) if rules else [DEFAULT_RULE]


def enrich_fields(
    document_text: str,
    fields: list[TemplateField],
    words: int | None = None,
) -> list[TemplateField]:
    """Fill context windows and backfill missing validation rules in place."""
    resolver = ContextResolver(document_text, words if words is not None else settings.CONTEXT_WORDS)
    unmatched = 0

    for field in fields:
        window = resolver.resolve(field.current_value)
        if not window.before and not window.after:
            unmatched += 1

        field.context_before = window.before
        field.context_after = window.after
        field.full_context = format_full_context(window.before, field.current_value, window.after)

        if not field.validation_rules:
            field.validation_rules = default_validation_rules(field.field_type)

    if unmatched:
        logger.info("%d of %d fields have no surrounding context", unmatched, len(fields))
    return fields
