from __future__ import annotations

import html
import re


_SCRIPT_BLOCK = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_TAG = re.compile(r"<[^>]*>")


def clean_text(text: str | None) -> str:
    """Clean a user-supplied string before it reaches validation.

    - Drop <script>/<style> blocks including their content
    - Strip remaining HTML tags while keeping inner text
    - Decode HTML entities (e.g. &amp; -> &)
    - Normalize whitespace and trim
    """

    if not text:
        return ""

    text = _SCRIPT_BLOCK.sub("", text)
    text = _TAG.sub("", text)
    text = html.unescape(text)
    # A decoded "&lt;b&gt;" must not turn back into markup
    text = _TAG.sub("", text)

    text = text.replace("\r\n", " ").replace("\n", " ")
    text = re.sub(r"\s+", " ", text)

    return text.strip()
