"""Prompt for template field extraction.

The model is asked for a JSON array only; enrichment-only attributes
(context windows) are computed locally and are not requested.
"""

_JSON_SUFFIX = """

CRITICAL OUTPUT RULES:
- Return ONLY a JSON array of objects. No other text before or after.
- "currentValue" must be copied exactly as it appears in the document.
- If the document contains no variable values, return an empty array: []"""

EXTRACTION_PROMPT = """Analyze the following document text and identify all fields that might need to be changed
when using this document as a template. For each field, provide detailed context:

1. Identify the current value
2. Describe what kind of data it is (name, date, email, phone, address, amount, etc.)
3. Identify its position in the document
4. Suggest validation rules
5. Note any dependencies with other fields
6. Provide format requirements

Return a JSON array of objects with these properties:
{
  "fieldName": "human readable name",
  "currentValue": "value from document",
  "fieldType": "type of data",
  "position": "character position in document",
  "validationRules": ["rule1", "rule2"],
  "dependencies": ["related field names"],
  "format": "expected format description"
}""" + _JSON_SUFFIX + """

Document text:
{document_text}
"""


def build_extraction_prompt(document_text: str) -> str:
    """Embed the full document text verbatim into the extraction prompt."""
    return EXTRACTION_PROMPT.replace("{document_text}", document_text)
