"""Signal derivation from the latest aligned values.

Pure functions, no state across cycles (no hysteresis, no debouncing).
Thresholds are strict: a reading exactly on a boundary is NEUTRAL, and
equal moving averages read as BEARISH.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from itertools import product

from chart_signals.config import SignalConfig
from chart_signals.engine.aligner import AlignedFrame
from chart_signals.series.types import NamedSeries


class OscillatorZone(str, Enum):
    """Reading of a bounded momentum oscillator (RSI)."""

    OVERBOUGHT = "overbought"
    OVERSOLD = "oversold"
    NEUTRAL = "neutral"


class TrendDirection(str, Enum):
    """Reading of the fast/slow moving-average crossover."""

    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


TAKE_PROFIT = "Consider taking profits or wait for pullback"
STRONG_ENTRY = "Strong buy signal - oversold in bullish trend"
WEAK_BOUNCE = "Potential bounce but trend is weak"
EXTENDED_TREND = "Trend is strong but overbought - watch for reversal"
MONITOR = "No strong signal - monitor for entry/exit opportunities"

RECOMMENDATIONS: dict[tuple[OscillatorZone, TrendDirection], str] = {
    (OscillatorZone.OVERBOUGHT, TrendDirection.BEARISH): TAKE_PROFIT,
    (OscillatorZone.OVERBOUGHT, TrendDirection.BULLISH): EXTENDED_TREND,
    (OscillatorZone.OVERBOUGHT, TrendDirection.NEUTRAL): MONITOR,
    (OscillatorZone.OVERSOLD, TrendDirection.BULLISH): STRONG_ENTRY,
    (OscillatorZone.OVERSOLD, TrendDirection.BEARISH): WEAK_BOUNCE,
    (OscillatorZone.OVERSOLD, TrendDirection.NEUTRAL): WEAK_BOUNCE,
    (OscillatorZone.NEUTRAL, TrendDirection.BULLISH): MONITOR,
    (OscillatorZone.NEUTRAL, TrendDirection.BEARISH): MONITOR,
    (OscillatorZone.NEUTRAL, TrendDirection.NEUTRAL): MONITOR,
}

_missing = set(product(OscillatorZone, TrendDirection)) - RECOMMENDATIONS.keys()
if _missing:
    raise RuntimeError(f"Recommendation table incomplete: {sorted(_missing)}")


@dataclass(frozen=True)
class SignalReport:
    """Signals and recommendation for the most recent values.

    ``oscillator_zone`` is None when no RSI value was available.
    """

    oscillator_zone: OscillatorZone | None
    trend_direction: TrendDirection
    recommendation: str
    rsi: float | None = None
    sma_fast: float | None = None
    sma_slow: float | None = None


def classify_oscillator(
    value: float | None,
    overbought: float = 70.0,
    oversold: float = 30.0,
) -> OscillatorZone | None:
    """Zone for an RSI reading, or None if there is no reading."""
    if value is None:
        return None
    if value > overbought:
        return OscillatorZone.OVERBOUGHT
    if value < oversold:
        return OscillatorZone.OVERSOLD
    return OscillatorZone.NEUTRAL


def classify_trend(
    sma_fast: float | None,
    sma_slow: float | None,
) -> TrendDirection:
    """Crossover direction; NEUTRAL only when a value is missing."""
    if sma_fast is None or sma_slow is None:
        return TrendDirection.NEUTRAL
    if sma_fast > sma_slow:
        return TrendDirection.BULLISH
    return TrendDirection.BEARISH


def recommend(
    zone: OscillatorZone | None,
    direction: TrendDirection,
) -> str:
    """Recommendation for a zone/trend pair; no zone (no RSI reading) gives MONITOR."""
    if zone is None:
        return MONITOR
    return RECOMMENDATIONS[(zone, direction)]


def derive_signals_from_values(
    rsi: float | None,
    sma_fast: float | None,
    sma_slow: float | None,
    config: SignalConfig | None = None,
) -> SignalReport:
    """Signals from the latest value of each series."""
    cfg = config or SignalConfig()
    zone = classify_oscillator(rsi, cfg.overbought, cfg.oversold)
    direction = classify_trend(sma_fast, sma_slow)
    return SignalReport(
        oscillator_zone=zone,
        trend_direction=direction,
        recommendation=recommend(zone, direction),
        rsi=rsi,
        sma_fast=sma_fast,
        sma_slow=sma_slow,
    )


def derive_signals(
    frame: AlignedFrame,
    config: SignalConfig | None = None,
) -> SignalReport:
    """Signals from the frame's most recent record.

    Raises:
        EmptySeriesError: If the frame is empty.
    """
    cfg = config or SignalConfig()
    latest = frame.latest()
    return derive_signals_from_values(
        rsi=latest.get(NamedSeries.rsi(cfg.rsi_period)),
        sma_fast=latest.get(NamedSeries.sma(cfg.sma_fast)),
        sma_slow=latest.get(NamedSeries.sma(cfg.sma_slow)),
        config=cfg,
    )
