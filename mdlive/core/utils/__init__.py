"""utils"""

from .common_utils import call_maybe_async, count_words, hash_text, run_coro_safely
from .discovery import scan
from .env_utils import load_env
from .logger_utils import init_logger
from .path_utils import (
    DEFAULT_IGNORE_DIRS,
    DEFAULT_SOURCE_SUFFIXES,
    decode_request_path,
    is_ignored_path,
    is_source_file,
    join_root,
    listing_sort_key,
    relative_to_root,
    sort_listing,
    to_logical_path,
    to_relative_path,
)
from .pydantic_config_parser import PydanticConfigParser
from .singleton import singleton

__all__ = [
    "call_maybe_async",
    "count_words",
    "hash_text",
    "run_coro_safely",
    "scan",
    "load_env",
    "init_logger",
    "DEFAULT_IGNORE_DIRS",
    "DEFAULT_SOURCE_SUFFIXES",
    "decode_request_path",
    "is_ignored_path",
    "is_source_file",
    "join_root",
    "listing_sort_key",
    "relative_to_root",
    "sort_listing",
    "to_logical_path",
    "to_relative_path",
    "PydanticConfigParser",
    "singleton",
]
