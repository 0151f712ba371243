"""Write user-supplied values back into the source document."""

from models import FieldReplacement


def replace_fields(document_text: str, replacements: list[FieldReplacement]) -> str:
    """Replace every literal occurrence of each current value, in request order."""
    updated = document_text
    for replacement in replacements:
        if not replacement.current_value:
            continue
        updated = updated.replace(replacement.current_value, replacement.new_value)
    return updated
