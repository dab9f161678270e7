"""Series domain types shared across the engine.

Frozen dataclasses for value objects. Timestamps are integer epoch seconds,
values are floats (indicator values are never monetary amounts).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SeriesKind(str, Enum):
    """Kind of numeric series a source can supply."""

    PRICE = "price"
    SMA = "sma"
    RSI = "rsi"


# --- Value Objects (frozen) ---


@dataclass(frozen=True)
class NamedSeries:
    """Identity of one series: its kind plus its parameters.

    Price has no period; indicators carry their lookback period.
    """

    kind: SeriesKind
    period: int | None = None

    def __post_init__(self) -> None:
        if self.kind is SeriesKind.PRICE:
            if self.period is not None:
                raise ValueError("Price series takes no period")
        elif self.period is None or self.period < 1:
            raise ValueError(
                f"{self.kind.value} period must be >= 1, got {self.period}"
            )

    @classmethod
    def price(cls) -> NamedSeries:
        return cls(SeriesKind.PRICE)

    @classmethod
    def sma(cls, period: int) -> NamedSeries:
        return cls(SeriesKind.SMA, period)

    @classmethod
    def rsi(cls, period: int) -> NamedSeries:
        return cls(SeriesKind.RSI, period)

    @property
    def is_primary(self) -> bool:
        return self.kind is SeriesKind.PRICE

    @property
    def label(self) -> str:
        """Short display name, e.g. "Close", "SMA20", "RSI14"."""
        if self.kind is SeriesKind.PRICE:
            return "Close"
        return f"{self.kind.value.upper()}{self.period}"


@dataclass(frozen=True)
class TimeSeriesPoint:
    """One sample of a series.

    ``value`` is None only in a price series, for a candle without a usable
    close; the timestamp still belongs to the alignment grid.
    """

    timestamp: int
    value: float | None


@dataclass(frozen=True)
class Resolution:
    """Chart resolution: display label, provider sampling token, span in days."""

    label: str
    token: str
    days: int

    def __post_init__(self) -> None:
        if self.days < 0:
            raise ValueError(f"Resolution days must be >= 0, got {self.days}")


@dataclass(frozen=True)
class TimeWindow:
    """Half-open ``[start, end)`` range in epoch seconds."""

    start: int
    end: int

    @property
    def span_seconds(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class SeriesRequest:
    """Immutable description of one series fetch for one cycle."""

    symbol: str
    window: TimeWindow
    resolution: Resolution
    series: NamedSeries
    enabled: bool = True


@dataclass(frozen=True)
class SeriesSuccess:
    """Fetched points, ordered by strictly increasing timestamp."""

    points: tuple[TimeSeriesPoint, ...]

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class SeriesFailure:
    """A fetch that did not produce points."""

    reason: str

    @property
    def ok(self) -> bool:
        return False


SeriesResult = SeriesSuccess | SeriesFailure
