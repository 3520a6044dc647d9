"""Reporting utilities: metric sinks, run manifests and plots."""

from .artifacts import config_hash, write_manifest
from .metrics import CsvSink, JsonlSink, read_jsonl
from .plots import PlotAdapter

__all__ = ["CsvSink", "JsonlSink", "PlotAdapter", "config_hash", "read_jsonl", "write_manifest"]
