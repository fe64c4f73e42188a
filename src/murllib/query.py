"""Query strings as ordered multimaps of decoded keys and values.

A value of None is a key without "=" ("?flag"), which is distinct from an
empty value ("?flag="). Keys serialize in the order they were first added,
each followed by all of its values in the order they were added.
"""

from typing import Iterable

from multidict import MultiDict

from .escape import Escaper, url_decode

QueryValue = str | None


def create_params_multimap() -> MultiDict[QueryValue]:
    return MultiDict()


def parse_query_parameters(raw_query: str | None) -> MultiDict[QueryValue]:
    """Parses a raw query string, dropping blank pieces such as those in "&&"."""
    result: MultiDict[QueryValue] = create_params_multimap()
    if raw_query is None:
        return result

    for single_param in raw_query.split("&"):
        if len(single_param.strip()) == 0:
            continue
        key, equals, value = single_param.partition("=")
        result.add(url_decode(key), url_decode(value) if equals else None)
    return result


def _unique_keys(params: MultiDict[QueryValue]) -> list[str]:
    return list(dict.fromkeys(params.keys()))


def grouped(params: MultiDict[QueryValue]) -> dict[str, list[QueryValue]]:
    return {key: params.getall(key) for key in _unique_keys(params)}


def build_query_parameters_string(params: MultiDict[QueryValue]) -> str:
    pieces: list[str] = []
    for key in _unique_keys(params):
        escaped_key: str = Escaper.FORM_PARAMETER.escape(key)
        for value in params.getall(key):
            if value is None:
                pieces.append(escaped_key)
            else:
                pieces.append(f"{escaped_key}={Escaper.FORM_PARAMETER.escape(value)}")
    return "&".join(pieces)


def add(params: MultiDict[QueryValue], name: str, value: QueryValue) -> None:
    params.add(name, value)


def add_all(params: MultiDict[QueryValue], name: str, values: Iterable[QueryValue]) -> None:
    params.extend([(name, value) for value in values])


def remove_all(params: MultiDict[QueryValue], name: str) -> None:
    params.popall(name, None)


def replace(params: MultiDict[QueryValue], name: str, value: QueryValue) -> None:
    remove_all(params, name)
    params.add(name, value)


def replace_all(params: MultiDict[QueryValue], name: str, values: Iterable[QueryValue]) -> None:
    remove_all(params, name)
    add_all(params, name, values)
