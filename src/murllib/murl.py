"""murllib.murl
A mutable URI builder. Edits are recorded as pending overrides on top of an
immutable ParsedURI and merged into a new, re-parsed ParsedURI only when the
current URI is requested.

The merged URI is not validated until it is built, e.g.
    murl = MURL.parse("http://[::1.1.1.1]")
    murl.set_path("dsfd/").is_path_relative()  # True
    murl.get_current_uri()  # raises StateError

MURL is mutable, so it is unhashable and compares by identity. Use str(murl)
or get_current_uri() as a dictionary key or for comparisons.
"""

import contextlib
import ipaddress
import logging

from typing import Iterable, Iterator, Mapping, NamedTuple, Self

from multidict import MultiDict

from . import query
from .errors import StructuralError, StateError
from .escape import Escaper, to_ascii, url_decode, url_encode, percent_decode
from .navigate import navigate
from .parse import EMPTY_URI, ParsedURI, parse_uri_reference
from .paths import build_raw_path_string, concat_raw_paths, escape_multi_segment_path, split_raw_path
from .query import QueryValue

_LOG: logging.Logger = logging.getLogger(__name__)

# Stands in for a missing scheme when the scheme-specific part is replaced.
UNSPECIFIED_SCHEME: str = "unspecified"

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address


class ResolvedAddress(NamedTuple):
    """An IP address together with the host name it is already known by, if any."""

    address: IPAddress
    hostname: str | None = None


def has_hostname_without_lookup(address: IPAddress | ResolvedAddress) -> bool:
    """True if a host name is already known for address. Never does a name lookup."""
    return isinstance(address, ResolvedAddress) and not _is_blank(address.hostname)


def _to_uri_string(address: IPAddress) -> str:
    if isinstance(address, ipaddress.IPv6Address):
        # No zone index: it only has meaning on the local host.
        return f"[{address.compressed.partition('%')[0]}]"
    return address.compressed


def _is_blank(text: str | None) -> bool:
    return text is None or len(text.strip()) == 0


class MURL:
    """Mutable URI. Create one with MURL.parse, MURL.create or MURL.create_empty."""

    __hash__ = None  # type: ignore[assignment]

    def __init__(self: Self, prototype: ParsedURI = EMPTY_URI) -> None:
        self._prototype: ParsedURI = prototype
        # None while there are edits that have not been built.
        self._current: ParsedURI | None = prototype
        self._change_underway: bool = False
        self._clear_overrides()

    def _clear_overrides(self: Self) -> None:
        self._query: MultiDict[QueryValue] | None = None
        # Handed out by edit_query_parameters; kept as the query across builds.
        self._query_handle: MultiDict[QueryValue] | None = None
        self._scheme: str | None = None
        self._remove_authority_and_scheme: bool = False
        self._raw_user_info: str | None = None
        self._host: str | None = None
        self._port: int | None = None
        self._raw_path: str | None = None
        self._fragment: str | None = None

    @classmethod
    def parse(cls: type[Self], text: str) -> Self:
        """Raises StructuralError if text is not a URI-Reference."""
        return cls(parse_uri_reference(text))

    @classmethod
    def create(cls: type[Self], uri: ParsedURI) -> Self:
        return cls(uri)

    @classmethod
    def create_empty(cls: type[Self]) -> Self:
        """A MURL for the empty URI-Reference ""."""
        return cls()

    @contextlib.contextmanager
    def _change(self: Self) -> Iterator[None]:
        # Left underway if the edit raises, so __str__ can tell.
        self._change_underway = True
        self._current = None
        yield
        self._change_underway = False

    def reset(self: Self, uri: ParsedURI = EMPTY_URI) -> Self:
        """Drops every pending edit and starts over from uri.
        A handle from edit_query_parameters is detached.
        """
        self._prototype = self._current = uri
        self._change_underway = False
        self._clear_overrides()
        return self

    # Building

    def is_needing_current_uri_construction(self: Self) -> bool:
        # A live query handle may have changed since the last build.
        return self._current is None or self._query_handle is not None

    def get_current_uri(self: Self) -> ParsedURI:
        """Builds the URI if there are pending edits. Should not be called while still editing."""
        current: ParsedURI | None = self._current
        if current is None or self._query_handle is not None:
            current = self.build()
        return current

    def build(self: Self) -> ParsedURI:
        """Merges the pending edits into a new prototype, clears them and returns it.
        Raises StateError if the merged text does not parse.
        """
        text: str = self._build_string()
        try:
            uri: ParsedURI = parse_uri_reference(text)
        except StructuralError as e:
            raise StateError(e.reason, text) from e
        _LOG.debug("built %r", text)
        handle: MultiDict[QueryValue] | None = self._query_handle
        self.reset(uri)
        if handle is not None:
            self._query = self._query_handle = handle
        return uri

    def _build_string(self: Self) -> str:
        prototype: ParsedURI = self._prototype
        scheme: str | None = self._scheme if self._scheme is not None else prototype.raw_scheme
        raw_user_info: str | None = (
            self._raw_user_info if self._raw_user_info is not None else prototype.raw_userinfo
        )
        raw_host: str | None = self._build_host_string() if self._host is not None else prototype.raw_host
        # Overrides are never 0, so only a parsed ":0" is written back as 0.
        port: int = self._port if self._port is not None else prototype.port
        raw_path: str = self._raw_path if self._raw_path is not None else prototype.raw_path
        raw_query: str | None = self.build_query_parameters_string()
        raw_fragment: str | None = (
            Escaper.FRAGMENT.escape(self._fragment) if self._fragment is not None else prototype.raw_fragment
        )

        result: str = ""
        has_authority: bool = False
        if not self._remove_authority_and_scheme:
            if not _is_blank(scheme):
                result += f"{scheme}:"
            has_authority = not _is_blank(raw_host) or port > -1 or not _is_blank(raw_user_info)
            if has_authority:
                result += "//"
            if not _is_blank(raw_user_info):
                result += f"{raw_user_info}@"
            if not _is_blank(raw_host):
                result += raw_host
            if port > -1:
                result += f":{port}"
        if not has_authority and raw_path.startswith("//"):
            # An empty authority, or the path's first segment would be read as the host.
            result += "//"
        if not _is_blank(raw_path):
            result += raw_path
        if not _is_blank(raw_query):
            result += f"?{raw_query}"
        if not _is_blank(raw_fragment):
            result += f"#{raw_fragment}"
        return result

    def _build_host_string(self: Self) -> str:
        host: str = self._host if self._host is not None else ""
        if host.startswith("[") and host.endswith("]"):
            # IP literals are written as given.
            return host
        return url_encode(host)

    # Scheme and authority

    @property
    def scheme(self: Self) -> str | None:
        if self._remove_authority_and_scheme:
            return None
        if self._scheme is not None:
            return self._scheme
        return self._prototype.scheme

    def set_scheme(self: Self, scheme: str) -> Self:
        """An empty scheme removes it."""
        with self._change():
            self._remove_authority_and_scheme = False
            self._scheme = scheme
        return self

    def remove_authority_and_scheme(self: Self) -> Self:
        with self._change():
            self._remove_authority_and_scheme = True
        return self

    @property
    def raw_user_info(self: Self) -> str | None:
        if self._remove_authority_and_scheme:
            return None
        if self._raw_user_info is not None:
            return self._raw_user_info
        return self._prototype.raw_userinfo

    @property
    def user(self: Self) -> str | None:
        raw: str | None = self.raw_user_info
        if raw is None or _is_blank(raw):
            return None
        return url_decode(raw.split(":")[0])

    @property
    def password(self: Self) -> str | None:
        raw: str | None = self.raw_user_info
        if raw is None or _is_blank(raw):
            return None
        parts: list[str] = raw.split(":")
        if len(parts) > 1:
            return url_decode(parts[1])
        return None

    def set_user_info(self: Self, user: str | None, password: str | None = None) -> Self:
        """A blank user removes the user info. An empty password still writes the ":"."""
        with self._change():
            if user is None or _is_blank(user):
                self._raw_user_info = ""
            else:
                self._remove_authority_and_scheme = False
                self._raw_user_info = url_encode(user)
                if password is not None:
                    self._raw_user_info += f":{url_encode(password)}"
        return self

    def remove_user_info(self: Self) -> Self:
        return self.set_user_info("", "")

    @property
    def host(self: Self) -> str | None:
        if self._remove_authority_and_scheme:
            return None
        if self._host is not None:
            return self._host
        return self._prototype.host

    def set_host(self: Self, host: str | None) -> Self:
        """None or "" removes the host. IP literals ("[::1]") are not escaped."""
        with self._change():
            self._host = host if host is not None else ""
            self._remove_authority_and_scheme = False
        return self

    def set_host_address(
        self: Self, address: IPAddress | ResolvedAddress | None, use_host_if_available: bool = False
    ) -> Self:
        """Sets the host from an IP address without any name lookup.
        IPv6 addresses are written as IP literals. With use_host_if_available,
        a ResolvedAddress that already knows its host name sets that name instead.
        """
        if address is None:
            return self.set_host("")
        if isinstance(address, ResolvedAddress):
            hostname: str | None = address.hostname if has_hostname_without_lookup(address) else None
            if use_host_if_available and hostname is not None:
                return self.set_host(hostname)
            return self.set_host(_to_uri_string(address.address))
        return self.set_host(_to_uri_string(address))

    @property
    def port(self: Self) -> int:
        """-1 if there is no port."""
        if self._remove_authority_and_scheme:
            return -1
        if self._port is not None:
            return self._port
        return self._prototype.port

    def set_port(self: Self, port: int | None) -> Self:
        """None, 0 or a negative port removes it."""
        with self._change():
            self._port = port if port is not None and port > 0 else -1
        return self

    def is_having_port(self: Self) -> bool:
        return self.port > 0

    # Scheme-specific part

    def get_raw_scheme_specific_part(self: Self) -> str:
        return self.get_current_uri().raw_scheme_specific_part

    def get_scheme_specific_part(self: Self) -> str:
        """e.g. the decoded address of mailto:pel%C3%A9@domain.org"""
        return self.get_current_uri().scheme_specific_part

    def set_raw_scheme_specific_part(self: Self, raw_scheme_specific_part: str | None) -> Self:
        """Replaces everything after the scheme, dropping pending edits, and re-parses at once.
        Without a scheme, the scheme becomes "unspecified".
        Raises StructuralError if the result does not parse.
        """
        scheme: str | None = self.scheme
        if scheme is None or _is_blank(scheme):
            scheme = UNSPECIFIED_SCHEME
        self.reset(parse_uri_reference(f"{scheme}:{raw_scheme_specific_part or ''}"))
        return self

    def set_scheme_specific_part(self: Self, scheme_specific_part: str | None) -> Self:
        """Escapes scheme_specific_part with the fragment rules first, so it
        cannot hold already-escaped text; "%C3%BC" would be escaped again.
        """
        return self.set_raw_scheme_specific_part(Escaper.FRAGMENT.escape(scheme_specific_part or ""))

    # Path

    @property
    def raw_path(self: Self) -> str:
        if self._raw_path is not None:
            return self._raw_path
        return self._prototype.raw_path

    @property
    def path(self: Self) -> str | None:
        raw: str = self.raw_path
        if _is_blank(raw):
            return None
        return percent_decode(raw)

    @property
    def raw_path_segments(self: Self) -> list[str]:
        """A new list of undecoded segments. "//as//df//" has three empty segments."""
        return split_raw_path(self.raw_path)

    @property
    def path_segments(self: Self) -> list[str]:
        return [percent_decode(segment) for segment in self.raw_path_segments]

    def is_having_path(self: Self) -> bool:
        """http://a.com/ has a path, http://a.com does not."""
        return not _is_blank(self.raw_path)

    def is_path_relative(self: Self) -> bool:
        raw: str = self.raw_path
        return len(raw) > 0 and not raw.startswith("/")

    def is_path_absolute(self: Self) -> bool:
        return self.is_having_path() and not self.is_path_relative()

    def set_raw_path(self: Self, raw_path: str | None) -> Self:
        with self._change():
            self._raw_path = raw_path if raw_path is not None else ""
        return self

    def set_path(self: Self, unescaped_path: str | None) -> Self:
        """Escapes each segment of unescaped_path. Write "\\/" for a "/" inside a segment.
        The path is not normalized.
        """
        return self.set_raw_path(escape_multi_segment_path(unescaped_path or ""))

    def set_path_segments(self: Self, absolute: bool, slash_at_end: bool, *segments: str) -> Self:
        """Replaces the path with segments, each escaped whole, so "/" may appear in a segment."""
        return self.set_raw_path(build_raw_path_string(absolute, slash_at_end, segments))

    def add_path_segments(self: Self, slash_at_end: bool, *segments: str) -> Self:
        if len(segments) == 0:
            return self
        return self.add_raw_path(build_raw_path_string(False, slash_at_end, segments))

    def add_raw_path(self: Self, raw_path: str) -> Self:
        return self.set_raw_path(concat_raw_paths(self.raw_path, raw_path))

    # Query

    def _query_parameters_multimap(self: Self) -> MultiDict[QueryValue]:
        if self._query is None:
            self._query = query.parse_query_parameters(self._prototype.raw_query)
        return self._query

    def build_query_parameters_string(self: Self) -> str | None:
        if self._query is None:
            return self._prototype.raw_query
        return query.build_query_parameters_string(self._query)

    @property
    def query_parameters(self: Self) -> dict[str, list[QueryValue]]:
        """A new dict of decoded values per key."""
        return query.grouped(self._query_parameters_multimap())

    def get_query_parameter_first_value(self: Self, name: str) -> QueryValue:
        return self._query_parameters_multimap().get(name)

    def is_having_query_params(self: Self) -> bool:
        # "?&" has a query but no parameters.
        return len(self._query_parameters_multimap()) > 0

    def edit_query_parameters(self: Self) -> MultiDict[QueryValue]:
        """The query parameters of this MURL, for editing in place.
        The handle stays live across builds until reset() or a scheme-specific part edit.
        """
        with self._change():
            params: MultiDict[QueryValue] = self._query_parameters_multimap()
            self._query_handle = params
        return params

    def add_query_parameter(self: Self, name: str, value: QueryValue) -> Self:
        with self._change():
            query.add(self._query_parameters_multimap(), name, value)
        return self

    def add_query_parameters(self: Self, name: str, *values: QueryValue) -> Self:
        with self._change():
            query.add_all(self._query_parameters_multimap(), name, values)
        return self

    def add_query_parameters_from(self: Self, params: Mapping[str, QueryValue]) -> Self:
        with self._change():
            multimap: MultiDict[QueryValue] = self._query_parameters_multimap()
            for name, value in params.items():
                query.add(multimap, name, value)
        return self

    def add_query_parameters_multi(self: Self, params: Mapping[str, Iterable[QueryValue]]) -> Self:
        with self._change():
            multimap: MultiDict[QueryValue] = self._query_parameters_multimap()
            for name, values in params.items():
                query.add_all(multimap, name, values)
        return self

    def remove_query_parameter(self: Self, name: str) -> Self:
        with self._change():
            query.remove_all(self._query_parameters_multimap(), name)
        return self

    def replace_query_parameter(self: Self, name: str, value: QueryValue) -> Self:
        with self._change():
            query.replace(self._query_parameters_multimap(), name, value)
        return self

    def replace_query_parameters(self: Self, name: str, *values: QueryValue) -> Self:
        with self._change():
            query.replace_all(self._query_parameters_multimap(), name, values)
        return self

    def replace_query_parameters_from(self: Self, params: Mapping[str, QueryValue]) -> Self:
        with self._change():
            multimap: MultiDict[QueryValue] = self._query_parameters_multimap()
            for name, value in params.items():
                query.replace(multimap, name, value)
        return self

    def replace_query_parameters_multi(self: Self, params: Mapping[str, Iterable[QueryValue]]) -> Self:
        with self._change():
            multimap: MultiDict[QueryValue] = self._query_parameters_multimap()
            for name, values in params.items():
                query.replace_all(multimap, name, values)
        return self

    def clear_query_parameters(self: Self) -> Self:
        with self._change():
            self._query_parameters_multimap().clear()
        return self

    # Fragment

    @property
    def fragment(self: Self) -> str | None:
        if self._fragment is not None:
            return self._fragment
        return self._prototype.fragment

    def set_fragment(self: Self, fragment: str | None) -> Self:
        """None or "" removes the fragment."""
        with self._change():
            self._fragment = fragment if fragment is not None else ""
        return self

    # Navigation

    def navigate(self: Self, reference: str) -> Self:
        """Follows reference like a browser following a link from this URI. Changes this MURL in place.
        MURL.parse("http://example.com/a/b.html").navigate("c.html") -> http://example.com/a/c.html
        MURL.parse("http://example.com/a/b.html").navigate("../../../../c.html") -> http://example.com/c.html
        MURL.parse("http://example.com/a/b.html").navigate("#anchor") -> http://example.com/a/b.html#anchor
        """
        return navigate(self, reference)

    # Copying and rendering

    def clone(self: Self) -> Self:
        """An independent copy. Pending edits are built first, raising StateError if they do not parse."""
        result: Self = self.__class__.__new__(self.__class__)
        result.__dict__.update(self.__dict__)
        result._query_handle = None
        if self.is_needing_current_uri_construction():
            result.build()
        else:
            # With no pending edits the cached query is only a parse of the prototype.
            result._query = None
        return result

    def __copy__(self: Self) -> Self:
        return self.clone()

    def __deepcopy__(self: Self, memo: dict) -> Self:
        return self.clone()

    def __str__(self: Self) -> str:
        """The ASCII form of the current URI. Builds it if needed."""
        if self._change_underway:
            if __debug__:
                _LOG.warning("MURL rendered while a change is underway; this should only happen while debugging")
            return to_ascii(self._build_string())
        return to_ascii(self.get_current_uri().serialize())

    def __repr__(self: Self) -> str:
        current: ParsedURI | None = self._current
        text: str = current.serialize() if current is not None and self._query_handle is None else self._build_string()
        return f"{self.__class__.__name__}({text!r})"
