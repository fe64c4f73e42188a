"""Splitting, joining and escaping of raw (percent-encoded) paths."""

from typing import Iterable

from .escape import Escaper


def split_raw_path(raw_path: str) -> list[str]:
    """Returns the raw segments of raw_path, without decoding them.
    A leading and a trailing "/" do not produce empty segments; any other
    empty segment is kept.
    e.g. split_raw_path("/ad//bc//..//") == ["ad", "", "bc", "", "..", ""]
    """
    if len(raw_path) == 0:
        return []
    segments: list[str] = raw_path.split("/")
    if raw_path.startswith("/"):
        segments = segments[1:]
    if raw_path.endswith("/") and len(segments) > 0:
        segments = segments[:-1]
    return segments


def build_raw_path_string(absolute: bool, slash_at_end: bool, segments: Iterable[str]) -> str:
    """Escapes each segment as a whole (a "/" inside one becomes %2F) and joins them with "/".
    slash_at_end only adds a "/" when there is at least one segment.
    """
    result: str = "/" if absolute else ""
    escaped: list[str] = [Escaper.PATH_SEGMENT.escape(segment) for segment in segments]
    result += "/".join(escaped)
    if slash_at_end and len(escaped) > 0:
        result += "/"
    return result


def concat_raw_paths(left: str, right: str) -> str:
    """Joins two raw paths with exactly one "/" at the seam.
    concat_raw_paths("", "") == ""
    concat_raw_paths("/", "") == "/"
    concat_raw_paths("", "/") == "/"
    concat_raw_paths("a", "") == "a/"
    concat_raw_paths("a", "b") == "a/b"
    concat_raw_paths("/", "/a") == "/a"
    """
    if len(left) == 0:
        return right
    if left.endswith("/"):
        if right.startswith("/"):
            return left + right[1:]
        return left + right
    if right.startswith("/"):
        return left + right
    return f"{left}/{right}"


def escape_multi_segment_path(unescaped_path: str) -> str:
    """Escapes each "/"-separated segment of unescaped_path.
    A backslash followed by "/" puts a literal "/" into the current segment,
    so "ad/b\\/c/\\//df" becomes "ad/b%2Fc/%2F/df".
    """
    result: str = ""
    segment: str = ""

    i: int = 0
    while i < len(unescaped_path):
        current: str = unescaped_path[i]
        if current == "\\" and unescaped_path[i + 1 : i + 2] == "/":
            segment += "/"
            i += 2
            continue
        if current == "/":
            result += Escaper.PATH_SEGMENT.escape(segment) + "/"
            segment = ""
        else:
            segment += current
        i += 1

    if len(segment) > 0:
        result += Escaper.PATH_SEGMENT.escape(segment)
    return result
