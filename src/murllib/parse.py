"""murllib.parse
The generic URI-Reference parser that MURL builds on.
Accepts RFC 3986 URI-References, with RFC 3987 characters allowed wherever
RFC 3987 allows them, and reports why a string is rejected.
"""

import dataclasses
import re

from typing import Self

from .errors import StructuralError
from .escape import percent_decode

# Each of these ABNF rules is from RFC 3986, 3987, 6874, or 5234.

# ALPHA = %x41-5A / %x61-7A
_ALPHA: str = r"[A-Za-z]"

# DIGIT = %x30-39
_DIGIT: str = r"[0-9]"

# HEXDIG = DIGIT / "A" / "B" / "C" / "D" / "E" / "F"
_HEXDIG: str = rf"(?:{_DIGIT}|[A-Fa-f])"

# ucschar = %xA0-D7FF / %xF900-FDCF / %xFDF0-FFEF
#         / %x10000-1FFFD / %x20000-2FFFD / %x30000-3FFFD
#         / %x40000-4FFFD / %x50000-5FFFD / %x60000-6FFFD
#         / %x70000-7FFFD / %x80000-8FFFD / %x90000-9FFFD
#         / %xA0000-AFFFD / %xB0000-BFFFD / %xC0000-CFFFD
#         / %xD0000-DFFFD / %xE1000-EFFFD
_UCSCHAR: str = "[\xa0-\ud7ff\uf900-\ufdcf\ufdf0-\uffef\U00010000-\U0001FFFD\U00020000-\U0002FFFD\U00030000-\U0003FFFD\U00040000-\U0004FFFD\U00050000-\U0005FFFD\U00060000-\U0006FFFD\U00070000-\U0007FFFD\U00080000-\U0008FFFD\U00090000-\U0009FFFD\U000A0000-\U000AFFFD\U000B0000-\U000BFFFD\U000C0000-\U000CFFFD\U000D0000-\U000DFFFD\U000E0000-\U000EFFFD]"

# iprivate = %xE000-F8FF / %xF0000-FFFFD / %x100000-10FFFD
_IPRIVATE: str = "[\ue000-\uf8ff\U000F0000-\U000FFFFD\U00100000-\U0010FFFD]"

# unreserved = ALPHA / DIGIT / "-" / "." / "_" / "~"
_UNRESERVED: str = rf"(?:{_ALPHA}|{_DIGIT}|[-._~])"

# iunreserved = ALPHA / DIGIT / "-" / "." / "_" / "~" / ucschar
_IUNRESERVED: str = rf"(?:{_ALPHA}|{_DIGIT}|[-._~]|{_UCSCHAR})"

# pct-encoded = "%" HEXDIG HEXDIG
_PCT_ENCODED: str = rf"%{_HEXDIG}{_HEXDIG}"

# sub-delims = "!" / "$" / "&" / "'" / "(" / ")" / "*" / "+" / "," / ";" / "="
_SUB_DELIMS: str = r"[!$&'()*+,;=]"

# ipchar = iunreserved / pct-encoded / sub-delims / ":" / "@"
_IPCHAR: str = rf"(?:{_IUNRESERVED}|{_PCT_ENCODED}|{_SUB_DELIMS}|[:@])"

# scheme = ALPHA *( ALPHA / DIGIT / "+" / "-" / "." )
_SCHEME: str = rf"{_ALPHA}(?:{_ALPHA}|{_DIGIT}|[+\-.])*"

# ipath = *( isegment / "/" ), the union of every path rule once the
# scheme and authority have been split off
_IPATH: str = rf"(?:{_IPCHAR}|/)*"

# iquery = *( ipchar / iprivate / "/" / "?" )
_IQUERY: str = rf"(?:{_IPCHAR}|{_IPRIVATE}|[/?])*"

# ifragment = *( ipchar / "/" / "?" )
_IFRAGMENT: str = rf"(?:{_IPCHAR}|[/?])*"

# iuserinfo = *( iunreserved / pct-encoded / sub-delims / ":" )
_IUSERINFO: str = rf"(?:{_IUNRESERVED}|{_PCT_ENCODED}|{_SUB_DELIMS}|:)*"

# dec-octet = DIGIT / %x31-39 DIGIT / "1" 2DIGIT / "2" %x30-34 DIGIT / "25" %x30-35
_DEC_OCTET: str = rf"(?:{_DIGIT}|[1-9]{_DIGIT}|1{_DIGIT}{{2}}|2[0-4]{_DIGIT}|25[0-5])"

# IPv4address = dec-octet "." dec-octet "." dec-octet "." dec-octet
_IPV4ADDRESS: str = rf"{_DEC_OCTET}\.{_DEC_OCTET}\.{_DEC_OCTET}\.{_DEC_OCTET}"

# h16 = 1*4HEXDIG
_H16: str = rf"(?:{_HEXDIG}{{1,4}})"

# ls32 = ( h16 ":" h16 ) / IPv4address
_LS32: str = rf"(?:{_H16}:{_H16}|{_IPV4ADDRESS})"

# IPv6address =                                      6( h16 ":" ) ls32
#                       /                       "::" 5( h16 ":" ) ls32
#                       / [               h16 ] "::" 4( h16 ":" ) ls32
#                       / [ *1( h16 ":" ) h16 ] "::" 3( h16 ":" ) ls32
#                       / [ *2( h16 ":" ) h16 ] "::" 2( h16 ":" ) ls32
#                       / [ *3( h16 ":" ) h16 ] "::"    h16 ":"   ls32
#                       / [ *4( h16 ":" ) h16 ] "::"              ls32
#                       / [ *5( h16 ":" ) h16 ] "::"              h16
#                       / [ *6( h16 ":" ) h16 ] "::"
_IPV6ADDRESS: str = (
    "(?:"
    + r"|".join(
        (
                                           rf"(?:{_H16}:){{6}}{_LS32}",
                                         rf"::(?:{_H16}:){{5}}{_LS32}",
                              rf"(?:{_H16})?::(?:{_H16}:){{4}}{_LS32}",
            rf"(?:(?:{_H16}:){{0,1}}{_H16})?::(?:{_H16}:){{3}}{_LS32}",
            rf"(?:(?:{_H16}:){{0,2}}{_H16})?::(?:{_H16}:){{2}}{_LS32}",
            rf"(?:(?:{_H16}:){{0,3}}{_H16})?::(?:{_H16}:){_LS32}",
            rf"(?:(?:{_H16}:){{0,4}}{_H16})?::{_LS32}",
            rf"(?:(?:{_H16}:){{0,5}}{_H16})?::{_H16}",
            rf"(?:(?:{_H16}:){{0,6}}{_H16})?::",
        )
    )
    + ")"
)

# ZoneID = 1*( unreserved / pct-encoded )
_ZONEID: str = rf"(?:{_UNRESERVED}|{_PCT_ENCODED})+"

# IPv6addrz = IPv6address "%25" ZoneID
_IPV6ADDRZ: str = rf"{_IPV6ADDRESS}%25{_ZONEID}"

# IPvFuture = "v" 1*HEXDIG "." 1*( unreserved / sub-delims / ":" )
_IPVFUTURE: str = rf"v{_HEXDIG}+\.(?:{_UNRESERVED}|{_SUB_DELIMS}|:)+"

# IP-literal = "[" ( IPv6address / IPv6addrz / IPvFuture  ) "]"
_IP_LITERAL: str = rf"\[(?:{_IPV6ADDRESS}|{_IPV6ADDRZ}|{_IPVFUTURE})\]"

# ireg-name = *( iunreserved / pct-encoded / sub-delims )
_IREG_NAME: str = rf"(?:{_IUNRESERVED}|{_PCT_ENCODED}|{_SUB_DELIMS})*"

# ihost = IP-literal / IPv4address / ireg-name
_IHOST: str = rf"(?P<host>{_IP_LITERAL}|{_IPV4ADDRESS}|{_IREG_NAME})"

# port = *DIGIT
_PORT: str = rf"(?P<port>{_DIGIT}*)"

# iauthority = [ iuserinfo "@" ] ihost [ ":" port ]
_IAUTHORITY: str = rf"(?:(?P<userinfo>{_IUSERINFO})@)?{_IHOST}(?::{_PORT})?"

_SCHEME_PAT: re.Pattern[str] = re.compile(rf"\A{_SCHEME}\Z")
_USERINFO_PAT: re.Pattern[str] = re.compile(rf"\A{_IUSERINFO}\Z")
_IP_LITERAL_PAT: re.Pattern[str] = re.compile(rf"\A{_IP_LITERAL}\Z")
_REG_HOST_PAT: re.Pattern[str] = re.compile(rf"\A(?:{_IPV4ADDRESS}|{_IREG_NAME})\Z")
_AUTHORITY_PAT: re.Pattern[str] = re.compile(rf"\A{_IAUTHORITY}\Z")
_PATH_PAT: re.Pattern[str] = re.compile(rf"\A{_IPATH}\Z")
_QUERY_PAT: re.Pattern[str] = re.compile(rf"\A{_IQUERY}\Z")
_FRAGMENT_PAT: re.Pattern[str] = re.compile(rf"\A{_IFRAGMENT}\Z")


@dataclasses.dataclass(frozen=True)
class ParsedURI:
    """An immutable, fully parsed URI-Reference. Build one with parse_uri_reference."""

    raw_scheme: str | None = None
    raw_userinfo: str | None = None
    raw_host: str | None = None
    raw_port: str | None = None
    raw_path: str = ""
    raw_query: str | None = None
    raw_fragment: str | None = None

    @property
    def scheme(self: Self) -> str | None:
        return self.raw_scheme

    @property
    def userinfo(self: Self) -> str | None:
        if self.raw_userinfo is None:
            return None
        return percent_decode(self.raw_userinfo)

    @property
    def host(self: Self) -> str | None:
        return self.raw_host

    @property
    def port(self: Self) -> int:
        """-1 when there is no port, or the port field is empty."""
        if self.raw_port is not None and len(self.raw_port) > 0:
            return int(self.raw_port, base=10)
        return -1

    @property
    def path(self: Self) -> str:
        return percent_decode(self.raw_path)

    @property
    def query(self: Self) -> str | None:
        if self.raw_query is None:
            return None
        return percent_decode(self.raw_query)

    @property
    def fragment(self: Self) -> str | None:
        if self.raw_fragment is None:
            return None
        return percent_decode(self.raw_fragment)

    @property
    def authority(self: Self) -> str | None:
        """userinfo@host:port"""
        if self.raw_host is None:
            return None
        result: str = ""
        if self.raw_userinfo is not None:
            result += f"{self.raw_userinfo}@"
        result += self.raw_host
        if self.raw_port is not None:
            result += f":{self.raw_port}"
        return result

    @property
    def raw_scheme_specific_part(self: Self) -> str:
        """Everything between the scheme colon and the fragment."""
        result: str = ""
        if self.authority is not None:
            result += f"//{self.authority}"
        result += self.raw_path
        if self.raw_query is not None:
            result += f"?{self.raw_query}"
        return result

    @property
    def scheme_specific_part(self: Self) -> str:
        return percent_decode(self.raw_scheme_specific_part)

    def serialize(self: Self) -> str:
        """Direct translation of RFC 3986 section 5.3"""
        result: str = ""
        if self.raw_scheme is not None:
            result += f"{self.raw_scheme}:"
        result += self.raw_scheme_specific_part
        if self.raw_fragment is not None:
            result += f"#{self.raw_fragment}"
        return result

    def normalize(self: Self) -> Self:
        return dataclasses.replace(self, raw_path=normalize_path(self.raw_path))

    def __str__(self: Self) -> str:
        return self.serialize()


def _check_authority(authority: str, data: str) -> re.Match[str]:
    m: re.Match[str] | None = _AUTHORITY_PAT.match(authority)
    if m is not None:
        return m

    # Work out which part of the authority is at fault.
    userinfo, at, hostport = authority.rpartition("@")
    if at and not _USERINFO_PAT.match(userinfo):
        raise StructuralError("illegal character in user info", data)
    if hostport.startswith("["):
        close: int = hostport.find("]")
        if close < 0 or not _IP_LITERAL_PAT.match(hostport[: close + 1]):
            raise StructuralError("malformed IP literal", data)
        raise StructuralError("expected port number", data)
    host, colon, port = hostport.rpartition(":")
    if colon and _REG_HOST_PAT.match(host) and not port.isdigit():
        raise StructuralError("expected port number", data)
    raise StructuralError("illegal character in authority", data)


def parse_uri_reference(data: str) -> ParsedURI:
    """Parses a URI-Reference (an absolute URI or a relative-ref).
    Raises StructuralError naming the first component that fails to parse.
    """
    scheme: str | None = None
    rest: str = data

    delimiter: re.Match[str] | None = re.search(r"[:/?#]", data)
    if delimiter is not None and delimiter.group() == ":":
        scheme = data[: delimiter.start()]
        if len(scheme) == 0:
            raise StructuralError("expected scheme name", data)
        if not _SCHEME_PAT.match(scheme):
            raise StructuralError("illegal character in scheme name", data)
        rest = data[delimiter.end() :]
        if len(rest) == 0:
            raise StructuralError("expected scheme-specific part", data)

    rest, hash_sign, fragment = rest.partition("#")
    rest, question_mark, query = rest.partition("?")

    userinfo: str | None = None
    host: str | None = None
    port: str | None = None
    path: str = rest
    if rest.startswith("//"):
        authority, slash, path = rest[2:].partition("/")
        path = slash + path
        if len(authority) == 0:
            if len(path) == 0:
                raise StructuralError("expected authority", data)
            # "///a" is the path "/a"; "////a" keeps its empty authority so
            # the path cannot be mistaken for one when serialized.
            if path.startswith("//"):
                host = ""
        else:
            m: re.Match[str] = _check_authority(authority, data)
            userinfo = m["userinfo"]
            host = m["host"]
            port = m["port"]

    if not _PATH_PAT.match(path):
        raise StructuralError("illegal character in path", data)
    if question_mark and not _QUERY_PAT.match(query):
        raise StructuralError("illegal character in query", data)
    if hash_sign and not _FRAGMENT_PAT.match(fragment):
        raise StructuralError("illegal character in fragment", data)

    return ParsedURI(
        raw_scheme=scheme,
        raw_userinfo=userinfo,
        raw_host=host,
        raw_port=port,
        raw_path=path,
        raw_query=query if question_mark else None,
        raw_fragment=fragment if hash_sign else None,
    )


EMPTY_URI: ParsedURI = ParsedURI()


def normalize_path(path: str) -> str:
    """Removes "." and ".." segments and duplicate slashes.
    Unlike remove_dot_segments from RFC 3986 section 5.2.4, a ".." with
    nothing left to remove is kept, so "/a/../../b" becomes "/../b".
    """
    if len(path) == 0:
        return path

    absolute: bool = path.startswith("/")
    segments: list[str] = path.split("/")
    trailing_slash: bool = segments[-1] in ("", ".", "..")

    result: list[str] = []
    for segment in segments:
        if segment in ("", "."):
            continue
        if segment == ".." and len(result) > 0 and result[-1] != "..":
            result.pop()
        else:
            result.append(segment)

    normalized: str = "/".join(result)
    if trailing_slash and len(result) > 0:
        normalized += "/"
    if absolute:
        return f"/{normalized}"
    if len(result) > 0 and ":" in result[0]:
        # Otherwise the first segment would read as a scheme.
        normalized = f"./{normalized}"
    return normalized
