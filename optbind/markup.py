"""Convert the HTML-like markup used in documentation strings into plain text.

The conversion is a tolerant single-pass scan: malformed or unknown tags are
dropped rather than rejected.
"""

import re
from enum import Enum, auto
from html.entities import html5

from optbind.exceptions import DocMarkupError

_DELIMITERS = re.compile(r"([<>])")
_REFERENCE = re.compile(r"&(#[0-9]+|#[xX][0-9a-fA-F]+|[A-Za-z][A-Za-z0-9]*);")
_HREF = re.compile(r"""href\s*=\s*(?P<quote>["'])(?P<address>.*?)(?P=quote)""", re.IGNORECASE)
_NON_PRINTABLE = re.compile(r"[^\x20-\x7e\n\t]")

_HEADINGS = frozenset(f"h{i}" for i in range(1, 7))

# Tags rendered as a newline whether opening or closing.
_BLOCK_TAGS = _HEADINGS | {"pre", "ul", "ol"}

# Tags rendered as a newline only when opening (or self-closing).
_BREAK_TAGS = frozenset({"p", "br", "hr"})


class _State(Enum):
    TEXT = auto()
    TAG = auto()


def _decode_reference(match: re.Match) -> str:
    name = match.group(1)
    if name.startswith("#"):
        codepoint = int(name[2:], 16) if name[1] in "xX" else int(name[1:])
        try:
            return chr(codepoint)
        except (ValueError, OverflowError):
            decoded = None
    else:
        decoded = html5.get(f"{name};")
    if decoded is None:
        raise DocMarkupError(f"Unresolvable character reference {match.group(0)!r} in documentation.")
    return decoded.replace("\xa0", " ")


def _decode_references(text: str) -> str:
    return _REFERENCE.sub(_decode_reference, text)


def _check_printable(text: str) -> str:
    if match := _NON_PRINTABLE.search(text):
        raise DocMarkupError(f"Non-ASCII character {match.group(0)!r} in documentation: {text!r}")
    return text


def _render_tag(content: str, anchors: list[str | None]) -> str:
    content = content.strip()
    closing = content.startswith("/")
    if closing:
        content = content[1:].lstrip()
    self_closing = content.endswith("/")
    if self_closing:
        content = content[:-1].rstrip()

    parts = content.split(None, 1)
    name = parts[0].lower() if parts else ""
    attributes = parts[1] if len(parts) > 1 else ""

    if name == "a":
        href = _HREF.search(attributes)
        if closing or (self_closing and href is None):
            address = anchors.pop() if anchors else None
            return f" ({address})" if address else ""
        anchors.append(href.group("address") if href else None)
        return ""
    elif name in _BLOCK_TAGS or (name in _BREAK_TAGS and not closing):
        return "\n"
    elif name == "li":
        return "\n" if closing else " - "
    elif name == "th":
        return "\t" if closing else ""
    return ""


def convert_from_html(text: str) -> str:
    """Render documentation markup as plain text.

    ==========================================  ======================
    Markup                                      Plain text
    ==========================================  ======================
    ``<p>``, ``<br>``, ``<hr>``, headings,      newline
    ``<pre>``, ``<ul>``, ``<ol>``
    ``<li>`` / ``</li>``                        ``" - "`` / newline
    ``</th>``                                   tab
    ``<a href="URL">text</a>``                  ``"text (URL)"``
    ``&lt;`` and other references               decoded character
    other tags                                  removed
    ==========================================  ======================

    Raises
    ------
    DocMarkupError
        The result contains an unresolvable character reference or non-printable-ASCII text.
    """
    state = _State.TEXT
    out: list[str] = []
    tag: list[str] = []
    anchors: list[str | None] = []

    for piece in _DELIMITERS.split(text):
        if state is _State.TEXT:
            if piece == "<":
                state, tag = _State.TAG, []
            else:
                out.append(piece)
        elif piece == ">":
            out.append(_render_tag("".join(tag), anchors))
            state = _State.TEXT
        elif piece == "<":
            # A stray '<' inside a tag; keep what we had as text and restart.
            out.append("<" + "".join(tag))
            tag = []
        else:
            tag.append(piece)

    if state is _State.TAG:
        out.append("<" + "".join(tag))
    # Unterminated anchors still show their address.
    out.extend(f" ({address})" for address in reversed(anchors) if address)

    return _check_printable(_decode_references("".join(out)))


def html_unescape(text: str) -> str:
    """Light-weight conversion for one-line summaries.

    Only character references and the paragraph marker ``<p>`` are handled.
    """
    return _check_printable(_decode_references(text.replace("<p>", "\n")))
