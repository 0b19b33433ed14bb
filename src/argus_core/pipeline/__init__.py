"""Frame-to-inference pipeline: admission control, formatting, and stats."""

from argus_core.pipeline.admission import InFlightFlag
from argus_core.pipeline.formatter import NOTHING_RECOGNIZED, ResultFormatter
from argus_core.pipeline.inference import Dispatcher, InferencePipeline, Presenter
from argus_core.pipeline.stats import PipelineStats, StatsSnapshot

__all__ = [
    "InferencePipeline",
    "InFlightFlag",
    "ResultFormatter",
    "NOTHING_RECOGNIZED",
    "Presenter",
    "Dispatcher",
    "PipelineStats",
    "StatsSnapshot",
]
