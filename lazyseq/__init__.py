"""Lazy push-sequence combinators with a pull bridge for zipping."""

from lazyseq.config import Settings, configure, get_settings, reset_settings
from lazyseq.errors import BridgeError, SequenceError
from lazyseq.lazy import (
    Seq,
    chain,
    count,
    cycle,
    cycle_values,
    empty,
    flatten,
    from_drive,
    values,
    zip_seqs,
)
from lazyseq.models import NOT_FOUND, BridgeStrategy, Lookup, OperationSpec, OperationType, Pair
from lazyseq.pull import IteratorPullSource, PullSource, ThreadPullSource, open_pull
from lazyseq.utils import PipelineMetrics, build_pipeline, measure_performance, metrics, setup_logging

__all__ = [
    "NOT_FOUND",
    "BridgeError",
    "BridgeStrategy",
    "IteratorPullSource",
    "Lookup",
    "OperationSpec",
    "OperationType",
    "PipelineMetrics",
    "Pair",
    "PullSource",
    "Seq",
    "SequenceError",
    "Settings",
    "ThreadPullSource",
    "build_pipeline",
    "chain",
    "configure",
    "count",
    "cycle",
    "cycle_values",
    "empty",
    "flatten",
    "from_drive",
    "get_settings",
    "measure_performance",
    "metrics",
    "open_pull",
    "reset_settings",
    "setup_logging",
    "values",
    "zip_seqs",
]
