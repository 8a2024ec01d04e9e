"""LLM input sanitization for prompt injection prevention.

Profile fields (name, target role, domain, skills) are typed by the user
and end up inside the roadmap prompt. They are normalized and filtered
before embedding; the filter is a mitigation, not a guarantee.
"""

import re
import unicodedata

# =============================================================================
# Patterns
# =============================================================================

# Invisible characters that can split a keyword and slip past the filters
_ZERO_WIDTH_CODEPOINTS: tuple[int, ...] = (
    0x00AD,  # Soft hyphen
    *range(0x200B, 0x2010),  # Zero-width space/joiners, LRM, RLM
    *range(0x202A, 0x202F),  # BiDi embedding controls
    *range(0x2060, 0x2065),  # Word joiner, invisible operators
    *range(0x2066, 0x206A),  # BiDi isolate controls
    0xFEFF,  # BOM
)
_ZERO_WIDTH_PATTERN = re.compile(
    "[" + "".join(re.escape(chr(cp)) for cp in _ZERO_WIDTH_CODEPOINTS) + "]"
)

# Control characters except \t, \n, \r
_CONTROL_CHAR_PATTERN = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

_REPLACEMENT_TAG = "[TAG]"
_REPLACEMENT_FILTERED = "[FILTERED]"
_REPLACEMENT_FILTERED_COLON = "[FILTERED]:"

# (pattern, replacement, flags)
_INJECTION_PATTERNS: list[tuple[str, str, int]] = [
    (r"^\s*SYSTEM\s*:", _REPLACEMENT_FILTERED_COLON, re.IGNORECASE | re.MULTILINE),
    (r"<\s*/?\s*(?:system|user|assistant|model)\s*>", _REPLACEMENT_TAG, re.IGNORECASE),
    (r"<\|(?:system|user|assistant|im_start|im_end)\|>", _REPLACEMENT_TAG, re.IGNORECASE),
    (r"ignore\s+(all\s+)?previous\s+instructions?", _REPLACEMENT_FILTERED, re.IGNORECASE),
    (r"disregard\s+(all\s+)?(prior|previous)", _REPLACEMENT_FILTERED, re.IGNORECASE),
    (r"forget\s+everything", _REPLACEMENT_FILTERED, re.IGNORECASE),
    (r"new\s+instructions?\s*:", _REPLACEMENT_FILTERED_COLON, re.IGNORECASE),
    (r"\[/?INST\]", _REPLACEMENT_FILTERED, re.IGNORECASE),
]

_COMPILED_PATTERNS = [
    (re.compile(pattern, flags), replacement) for pattern, replacement, flags in _INJECTION_PATTERNS
]

# Single profile fields are short; anything longer is truncated
MAX_FIELD_LENGTH = 500


def sanitize_llm_input(text: str, max_length: int = MAX_FIELD_LENGTH) -> str:
    """Sanitize user-provided text before embedding in an LLM prompt.

    Args:
        text: Raw user-provided text.
        max_length: Truncation limit applied after filtering.

    Returns:
        Sanitized text with injection patterns neutralized.
    """
    if not text:
        return text

    # NFKC folds fullwidth and styled variants (Ｓ -> S) before matching
    result = unicodedata.normalize("NFKC", text)
    result = _ZERO_WIDTH_PATTERN.sub("", result)
    result = _CONTROL_CHAR_PATTERN.sub("", result)

    for pattern, replacement in _COMPILED_PATTERNS:
        result = pattern.sub(replacement, result)

    return result[:max_length]


def sanitize_llm_list(items: list[str] | tuple[str, ...]) -> list[str]:
    """Sanitize each entry, dropping ones that end up empty."""
    cleaned = (sanitize_llm_input(item).strip() for item in items)
    return [item for item in cleaned if item]
