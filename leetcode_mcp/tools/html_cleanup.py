"""Turn LeetCode problem HTML into readable markdown-ish text.

This is a fixed sequence of literal substring replacements, not an HTML
parser. Rules run in table order; entities are decoded last, so decoded
``&lt;``/``&gt;`` are never re-interpreted as tags.
"""

from typing import Tuple


HTML_REPLACEMENTS: Tuple[Tuple[str, str], ...] = (
    ("</p>", "\n\n"),
    ("<p>", ""),
    ("<strong>", "**"),
    ("</strong>", "**"),
    ("<code>", "`"),
    ("</code>", "`"),
    ("<pre>", "\n```\n"),
    ("</pre>", "\n```\n"),
    ("<ul>", "\n"),
    ("</ul>", "\n"),
    ("<li>", "• "),
    ("</li>", "\n"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&amp;", "&"),
    ("&quot;", '"'),
)


def clean_html(content: str) -> str:
    """Apply the replacement table in order and strip surrounding whitespace."""
    for fragment, replacement in HTML_REPLACEMENTS:
        content = content.replace(fragment, replacement)
    return content.strip()
