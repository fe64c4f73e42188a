"""Browser-style navigation: what URI do you end up at when you follow a
link to reference from the page at current?
"""

import logging

from typing import TYPE_CHECKING

from .parse import normalize_path
from .paths import concat_raw_paths

if TYPE_CHECKING:
    from .murl import MURL

_LOG: logging.Logger = logging.getLogger(__name__)


def _resolve_relative_path(current: "MURL", relative_path: str) -> str:
    base_path: str = current.raw_path
    if current.host is not None and len(base_path) == 0:
        base_path = "/"
    # The last segment of the base is a document, not a directory.
    path: str = normalize_path(concat_raw_paths(base_path, f"../{relative_path}"))
    # Going above the root stays at the root.
    while path.startswith("/../"):
        path = path[3:]
    return path


def navigate(current: "MURL", reference: str) -> "MURL":
    """Changes current in place to the target of reference and returns it.
    reference may be an absolute URI, a network-path reference, a path, a
    query or a fragment. A changed path is normalized. Raises
    StructuralError if reference does not parse.
    """
    target: "MURL" = type(current).parse(reference)

    if target.host is not None:
        _LOG.debug("navigating to %r replaces the whole URI", reference)
        return current.reset(target.get_current_uri())

    if target.is_having_path():
        path: str = target.raw_path
        if target.is_path_relative():
            path = _resolve_relative_path(current, path)
        _LOG.debug("navigating to %r sets the path %r", reference, path)
        current.set_raw_path(path)
        current.clear_query_parameters().add_query_parameters_multi(target.query_parameters)
        current.set_fragment(target.fragment)
    elif target.is_having_query_params():
        current.clear_query_parameters().add_query_parameters_multi(target.query_parameters)
        current.set_fragment(target.fragment)
    else:
        current.set_fragment(target.fragment)
    return current
