"""Optional persistence helpers kept outside the analysis core.

:mod:`csv_writer` records raw samples to CSV when a sink path is configured.
"""

from .csv_writer import CsvSampleSink

__all__ = ["CsvSampleSink"]
