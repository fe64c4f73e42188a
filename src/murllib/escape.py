"""Percent-encoding for the four character classes a MURL writes.

Each escaper is a total str -> str function. They differ only in which
characters are left unescaped.
"""

import enum

from typing import Callable, Self
from urllib.parse import quote, quote_plus, unquote, unquote_plus

_DEFAULT_ENCODING: str = "utf-8"

# sub-delims = "!" / "$" / "&" / "'" / "(" / ")" / "*" / "+" / "," / ";" / "="
_SUB_DELIMS: str = "!$&'()*+,;="

# Unreserved characters are always safe for quote and quote_plus.
_PATH_SEGMENT_SAFE: str = _SUB_DELIMS + ":@"
_FRAGMENT_SAFE: str = _SUB_DELIMS + ":@/?"
_FORM_SAFE: str = "*"


def _escape_form(text: str) -> str:
    return quote_plus(text, safe=_FORM_SAFE, encoding=_DEFAULT_ENCODING)


def _escape_path_segment(text: str) -> str:
    return quote(text, safe=_PATH_SEGMENT_SAFE, encoding=_DEFAULT_ENCODING)


def _escape_fragment(text: str) -> str:
    return quote(text, safe=_FRAGMENT_SAFE, encoding=_DEFAULT_ENCODING)


class Escaper(enum.Enum):
    USERINFO_HOST = "userinfo_host"
    PATH_SEGMENT = "path_segment"
    FORM_PARAMETER = "form_parameter"
    FRAGMENT = "fragment"

    def escape(self: Self, text: str) -> str:
        return _ESCAPERS[self](text)


_ESCAPERS: dict[Escaper, Callable[[str], str]] = {
    Escaper.USERINFO_HOST: _escape_form,
    Escaper.PATH_SEGMENT: _escape_path_segment,
    Escaper.FORM_PARAMETER: _escape_form,
    Escaper.FRAGMENT: _escape_fragment,
}


def url_encode(text: str) -> str:
    """Form-encodes text ("a b&c" -> "a+b%26c"), as used for user info and hosts."""
    return Escaper.USERINFO_HOST.escape(text)


def url_decode(text: str) -> str:
    """Inverse of url_encode: "+" decodes to a space."""
    return unquote_plus(text, encoding=_DEFAULT_ENCODING)


def percent_decode(text: str) -> str:
    """Decodes %XX escapes only; "+" is kept."""
    return unquote(text, encoding=_DEFAULT_ENCODING)


def to_ascii(text: str) -> str:
    """Percent-encodes every non-ASCII character, leaving ASCII untouched.
    e.g. to_ascii("/päth") == "/p%C3%A4th"
    """
    if text.isascii():
        return text
    return "".join(c if c.isascii() else quote(c, safe="", encoding=_DEFAULT_ENCODING) for c in text)
