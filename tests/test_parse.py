import pytest

from murllib import EMPTY_URI, ErrorKind, ParsedURI, StructuralError, normalize_path, parse_uri_reference


def test_parse_full_uri():
    uri = parse_uri_reference("https://user:pw@example.com:8080/a/b?c=d#frag")
    assert uri.raw_scheme == "https"
    assert uri.raw_userinfo == "user:pw"
    assert uri.raw_host == "example.com"
    assert uri.port == 8080
    assert uri.raw_path == "/a/b"
    assert uri.raw_query == "c=d"
    assert uri.raw_fragment == "frag"
    assert uri.authority == "user:pw@example.com:8080"


def test_parse_relative_references():
    assert parse_uri_reference("a/df") == ParsedURI(raw_path="a/df")
    assert parse_uri_reference("../dsfd/").raw_path == "../dsfd/"
    assert parse_uri_reference("?p=1").raw_query == "p=1"
    assert parse_uri_reference("#").raw_fragment == ""
    assert parse_uri_reference("") == EMPTY_URI


def test_empty_and_absent_components_differ():
    uri = parse_uri_reference("http://host:?#")
    assert uri.raw_port == ""
    assert uri.port == -1
    assert uri.raw_query == ""
    assert uri.raw_fragment == ""
    assert parse_uri_reference("http://host").raw_query is None


@pytest.mark.parametrize(
    "text",
    [
        "",
        "/",
        "http://example.com",
        "https://somehost.de:0/path?aquery=answer#fragging",
        "https://somehost.de:1000000/path",
        "mailto:pel%C3%A9@domain.org",
        "http://[::FFFF:129.144.52.38]:81/",
        "//example.com/a?b#c",
        "http://host:/",
        "/?test2=&test3=c+f",
    ],
)
def test_serialize_is_verbatim(text):
    assert parse_uri_reference(text).serialize() == text


def test_parse_keeps_case():
    uri = parse_uri_reference("HTTP://Example.COM/%c3%bc")
    assert uri.raw_scheme == "HTTP"
    assert uri.raw_host == "Example.COM"
    assert uri.raw_path == "/%c3%bc"


def test_triple_slash_is_a_path():
    uri = parse_uri_reference("///")
    assert uri.raw_scheme is None
    assert uri.raw_host is None
    assert uri.raw_path == "/"


@pytest.mark.parametrize(
    "text, reason",
    [
        ("//", "expected authority"),
        ("http://", "expected authority"),
        ("blah:", "expected scheme-specific part"),
        ("http:", "expected scheme-specific part"),
        (":x", "expected scheme name"),
        ("1a:b", "illegal character in scheme name"),
        ("http://[::1.1.1.1]dsfd/", "expected port number"),
        ("http://host:8x/", "expected port number"),
        ("http://[::1/", "malformed IP literal"),
        ("http://ho st/", "illegal character in authority"),
        ("/a b", "illegal character in path"),
        ("/a?b c", "illegal character in query"),
        ("/a#b#c", "illegal character in fragment"),
    ],
)
def test_parse_failures(text, reason):
    with pytest.raises(StructuralError) as ctx:
        parse_uri_reference(text)
    assert ctx.value.reason == reason
    assert ctx.value.kind is ErrorKind.STRUCTURAL
    assert reason in str(ctx.value)
    assert isinstance(ctx.value, ValueError)


def test_decoded_properties():
    uri = parse_uri_reference("blah:pel%C3%A9@domain.org#a%20b")
    assert uri.scheme_specific_part == "pelé@domain.org"
    assert uri.raw_scheme_specific_part == "pel%C3%A9@domain.org"
    assert uri.fragment == "a b"


def test_non_ascii_is_accepted():
    uri = parse_uri_reference("http://köster.com/päth")
    assert uri.raw_host == "köster.com"
    assert uri.path == "/päth"


@pytest.mark.parametrize(
    "path, expected",
    [
        ("", ""),
        ("/", "/"),
        ("/a/b/../c", "/a/c"),
        ("/a/./b/.", "/a/b/"),
        ("a/b/..", "a/"),
        ("a/b/../", "a/"),
        ("//a//b", "/a/b"),
        ("/a/../../b", "/../b"),
        ("../a", "../a"),
        ("/path/../p43", "/p43"),
        ("a:b/c", "./a:b/c"),
    ],
)
def test_normalize_path(path, expected):
    assert normalize_path(path) == expected


def test_normalize_uri_only_touches_the_path():
    uri = parse_uri_reference("http://a.com/x/../y?q=..#..")
    assert uri.normalize().serialize() == "http://a.com/y?q=..#.."
