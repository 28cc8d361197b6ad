"""Configuration for the scalarq engine."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

# Nesting limit for `not` and parentheses in a filter, and for programmatic trees.
MAX_EXPRESSION_DEPTH = 128


@dataclass
class ScalarqConfig:
    """Configuration for the in-memory client and its collections."""

    default_database: str = "default"
    default_partition_name: str = "_default"
    max_filter_length: int = 65536
    max_query_result_window: int = 16384
    max_expression_depth: int = MAX_EXPRESSION_DEPTH
    filter_cache_size: int = 256
    default_varchar_max_length: int = 65535
    clock: Callable[[], float] = time.time
