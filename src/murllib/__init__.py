__version__ = "0.1"

from .errors import ErrorKind, StateError, StructuralError, URIError
from .escape import Escaper, percent_decode, to_ascii, url_decode, url_encode
from .murl import MURL, UNSPECIFIED_SCHEME, ResolvedAddress, has_hostname_without_lookup
from .navigate import navigate
from .parse import EMPTY_URI, ParsedURI, normalize_path, parse_uri_reference
from .paths import build_raw_path_string, concat_raw_paths, escape_multi_segment_path, split_raw_path
from .query import build_query_parameters_string, create_params_multimap, parse_query_parameters
