"""
Utility functions for lazyseq

Logging setup, performance measurement for pipelines, and a declarative
pipeline builder.
"""

import gc
import logging
import sys
import time
import tracemalloc
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, Iterable, List, Optional, Tuple, Union

from lazyseq.config import get_settings
from lazyseq.lazy import Seq, values
from lazyseq.models import OperationSpec, OperationType

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s:%(lineno)d] - %(message)s'


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """Attach a stdout handler to the lazyseq logger tree"""
    package_logger = logging.getLogger('lazyseq')
    package_logger.setLevel(level.upper() if level else get_settings().log_level)
    if not any(getattr(h, '_lazyseq', False) for h in package_logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._lazyseq = True
        package_logger.addHandler(handler)
    return package_logger


@dataclass
class PipelineMetrics:
    """Timing and peak memory of measured pipeline runs; keeps the latest ``history_size`` runs"""
    history_size: int = 100
    operations: Deque[Dict[str, Any]] = field(default_factory=deque)
    total_time_ms: float = 0.0
    total_memory_mb: float = 0.0
    operation_count: int = 0

    def __post_init__(self):
        self.operations = deque(self.operations, maxlen=self.history_size)

    def record(self, performance_info: Dict[str, Any]):
        self.operations.append(performance_info)
        self.total_time_ms += performance_info["execution_time_ms"]
        self.total_memory_mb += performance_info["memory_usage_mb"]
        self.operation_count += 1

    def summary(self) -> Dict[str, Any]:
        count = max(self.operation_count, 1)
        return {
            "total_operations": self.operation_count,
            "total_time_ms": self.total_time_ms,
            "total_memory_mb": self.total_memory_mb,
            "avg_time_ms": self.total_time_ms / count,
            "avg_memory_mb": self.total_memory_mb / count,
        }

    def clear(self):
        self.operations.clear()
        self.total_time_ms = 0.0
        self.total_memory_mb = 0.0
        self.operation_count = 0


metrics = PipelineMetrics()


def measure_performance(operation_name: str, func, *args, **kwargs) -> Tuple[Any, Dict[str, Any]]:
    """
    Call ``func`` with memory tracking and return ``(result, performance_info)``.

    Only the size of the result is recorded in ``metrics``, never the result.
    """
    tracemalloc.start()
    gc.collect()
    start_time = time.perf_counter()
    performance_info = {"operation": operation_name, "timestamp": time.time()}

    try:
        result = func(*args, **kwargs)
        performance_info["success"] = True
        performance_info["result_size"] = len(result) if hasattr(result, "__len__") else None
        return result, performance_info

    except Exception as e:
        performance_info.update(success=False, error=str(e))
        logger.warning(f"Operation '{operation_name}' failed: {e}")
        raise

    finally:
        current, peak = tracemalloc.get_traced_memory()
        tracemalloc.stop()
        performance_info["execution_time_ms"] = (time.perf_counter() - start_time) * 1000
        performance_info["memory_usage_mb"] = peak / 1024 / 1024
        metrics.record(performance_info)


def _apply(seq: Seq, op: OperationSpec) -> Seq:
    if op.type is OperationType.MAP:
        return seq.map(op.function)
    if op.type is OperationType.FILTER:
        return seq.filter(op.function)
    if op.type is OperationType.TAKE:
        return seq.take(op.count)
    if op.type is OperationType.TAKE_WHILE:
        return seq.take_while(op.function)
    if op.type is OperationType.DROP:
        return seq.drop(op.count)
    if op.type is OperationType.DROP_WHILE:
        return seq.drop_while(op.function)
    if op.type is OperationType.ENUMERATE:
        return seq.enumerate()
    return seq.cycle()


def build_pipeline(source: Union[Seq, Iterable],
                   operations: List[Union[OperationSpec, Dict[str, Any]]]) -> Seq:
    """
    Apply a list of operation specs to ``source`` and return the new Seq.

    Plain dicts are validated into ``OperationSpec``; an invalid one raises
    ``pydantic.ValidationError`` before anything is built.
    """
    specs = [op if isinstance(op, OperationSpec) else OperationSpec.model_validate(op)
             for op in operations]
    seq = source if isinstance(source, Seq) else values(source)
    for spec in specs:
        seq = _apply(seq, spec)
    logger.debug(f"Built pipeline: {[spec.type.value for spec in specs]}")
    return seq
