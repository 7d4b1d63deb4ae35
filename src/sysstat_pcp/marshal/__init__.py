"""Conversion between sample buffers and archive metrics."""

from .define import MetricDefiner
from .reader import ReadDispatcher, ReadOutcome, read_double, read_float, read_str, read_u32, read_u64
from .writer import WriteMarshaller, format_value

__all__ = [
    "MetricDefiner",
    "ReadDispatcher",
    "ReadOutcome",
    "WriteMarshaller",
    "format_value",
    "read_double",
    "read_float",
    "read_str",
    "read_u32",
    "read_u64",
]
