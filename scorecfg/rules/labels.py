"""Label shortening for items populated from the lead field catalog."""

import re

LABEL_MAX_LENGTH = 80
ELLIPSIS = "..."

# A trailing " (annotation)", e.g. "Annual Revenue (USD)"
_TRAILING_PARENTHETICAL = re.compile(r"\s\([^)]+\)$")


def shorten_label(label: str, max_length: int = LABEL_MAX_LENGTH) -> str:
    """Strip a trailing parenthetical and truncate to ``max_length`` characters.

    Labels longer than ``max_length`` keep ``max_length - 3`` characters
    followed by an ellipsis.
    """
    clean = _TRAILING_PARENTHETICAL.sub("", label or "")
    if len(clean) > max_length:
        return clean[: max_length - len(ELLIPSIS)] + ELLIPSIS
    return clean
