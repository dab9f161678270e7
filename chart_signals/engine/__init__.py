"""Engine layer: windowing, fetch orchestration, alignment and signals."""

from chart_signals.engine.aligner import AlignedFrame, AlignedRecord, align_series
from chart_signals.engine.cycle import (
    ChartSession,
    ChartState,
    IndicatorToggles,
    run_fetch_cycle,
)
from chart_signals.engine.errors import (
    CycleError,
    PrimaryFetchFailure,
    StaleCycleDiscarded,
)
from chart_signals.engine.orchestrator import FetchBundle, SeriesFetchOrchestrator
from chart_signals.engine.signals import (
    OscillatorZone,
    SignalReport,
    TrendDirection,
    derive_signals,
    derive_signals_from_values,
)
from chart_signals.engine.snapshot import TechnicalSnapshot, fetch_snapshot
from chart_signals.engine.window import (
    RESOLUTIONS,
    get_resolution,
    lookback_window,
    resolve_window,
)

__all__ = [
    "RESOLUTIONS",
    "AlignedFrame",
    "AlignedRecord",
    "ChartSession",
    "ChartState",
    "CycleError",
    "FetchBundle",
    "IndicatorToggles",
    "OscillatorZone",
    "PrimaryFetchFailure",
    "SeriesFetchOrchestrator",
    "SignalReport",
    "StaleCycleDiscarded",
    "TechnicalSnapshot",
    "TrendDirection",
    "align_series",
    "derive_signals",
    "derive_signals_from_values",
    "fetch_snapshot",
    "get_resolution",
    "lookback_window",
    "resolve_window",
]
