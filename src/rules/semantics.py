"""
Field semantics tables.

Static registry of legal value domains for condition fields and indicator
parameters, operator-specific rarity caveats, indicator dependencies and
the limits used by the advisory heuristics. Every validator reads its
ranges from here; adding a field means adding one entry.

All tables are read-only mappings built once at import time.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, FrozenSet, Mapping, Optional, Tuple

from .models import Operator


@dataclass(frozen=True)
class RarityCaveat:
    """A threshold beyond which a condition will seldom, if ever, trigger."""
    message: str                          # formatted with {value}
    operator: Optional[Operator] = None   # None = any operator
    above: Optional[float] = None
    below: Optional[float] = None

    def applies(self, operator: Optional[str], value: float) -> bool:
        if self.operator is not None and operator != self.operator:
            return False
        if self.above is not None and value > self.above:
            return True
        if self.below is not None and value < self.below:
            return True
        return False


@dataclass(frozen=True)
class ValueDomain:
    """Legal value domain of a condition field or indicator parameter."""
    label: str
    type: str = "number"                          # number | string | boolean
    min: Optional[float] = None
    max: Optional[float] = None
    required: bool = True
    operators: Optional[FrozenSet[Operator]] = None   # None = every operator
    caveats: Tuple[RarityCaveat, ...] = ()

    def supports(self, operator: Optional[str]) -> bool:
        if self.operators is None or operator is None:
            return True
        return Operator(operator) in self.operators

    def bound_violation(self, value: float, name: str = "value") -> Optional[str]:
        """Describe the violated bound for ``value``, or None if in range.

        ``name`` is the property being checked ("value" or "value2").
        """
        below_min = self.min is not None and value < self.min
        above_max = self.max is not None and value > self.max
        if not (below_min or above_max):
            return None

        subject = self.label if name == "value" else f"{self.label} {name}"
        if self.min is not None and self.max is not None:
            return f"{self.label} {name} must be between {self.min} and {self.max}"
        if self.min == 0:
            return f"{subject} cannot be negative"
        if self.min is not None:
            return f"{self.label} {name} must be >= {self.min}"
        return f"{self.label} {name} must be <= {self.max}"


_PRICE = ValueDomain(label="Price", min=0)
_MOVING_AVERAGE = ValueDomain(label="Moving average", min=0)
_BOLLINGER = ValueDomain(label="Bollinger band", min=0)
_STOCHASTIC = ValueDomain(label="Stochastic", min=0, max=100)

FIELD_DOMAINS: Mapping[str, ValueDomain] = MappingProxyType({
    # Indicators
    "RSI": ValueDomain(
        label="RSI",
        min=0,
        max=100,
        caveats=(
            RarityCaveat(
                message="RSI > {value} is extremely rare and may never trigger",
                operator=Operator.GREATER_THAN,
                above=90,
            ),
            RarityCaveat(
                message="RSI < {value} is extremely rare and may never trigger",
                operator=Operator.LESS_THAN,
                below=10,
            ),
        ),
    ),
    "MACD": ValueDomain(label="MACD"),
    "ATR": ValueDomain(label="ATR", min=0),
    "Bollinger_Upper": _BOLLINGER,
    "Bollinger_Lower": _BOLLINGER,
    "Stochastic_K": _STOCHASTIC,
    "Stochastic_D": _STOCHASTIC,
    # Volume
    "volume": ValueDomain(label="Volume", min=0),
    "volume_ratio": ValueDomain(
        label="Volume ratio",
        min=0,
        caveats=(
            RarityCaveat(
                message="Volume ratio > {value} is very rare and may not trigger often",
                above=5,
            ),
        ),
    ),
    # Price and risk levels
    "current_price": _PRICE,
    "price": _PRICE,
    "stop_loss": ValueDomain(label="Stop loss", min=0),
    "safety_line": ValueDomain(label="Safety line", min=0),
    # News
    "news_sentiment": ValueDomain(label="News sentiment", min=-1, max=1),
    "news_category": ValueDomain(
        label="News category",
        type="string",
        operators=frozenset({Operator.EQUALS}),
    ),
    # Portfolio
    "portfolio_weight": ValueDomain(label="Portfolio weight", min=0, max=100),
    "position_pnl_pct": ValueDomain(label="Position P&L %"),
})

# Checked in order when a field has no exact entry.
FIELD_PATTERN_DOMAINS: Tuple[Tuple[Callable[[str], bool], ValueDomain], ...] = (
    (lambda name: "price" in name, _PRICE),
    (lambda name: name.startswith(("SMA_", "EMA_")), _MOVING_AVERAGE),
)


def lookup_field_domain(field: Optional[str]) -> Optional[ValueDomain]:
    """Resolve the domain of a condition field, or None for unknown fields."""
    if not field:
        return None
    domain = FIELD_DOMAINS.get(field)
    if domain is not None:
        return domain
    for matches, pattern_domain in FIELD_PATTERN_DOMAINS:
        if matches(field):
            return pattern_domain
    return None


# Indicator parameter rules: indicator name -> param name -> domain
INDICATOR_PARAM_RULES: Mapping[str, Mapping[str, ValueDomain]] = MappingProxyType({
    "RSI": MappingProxyType({
        "period": ValueDomain(label="period", min=2, max=100),
        "overbought": ValueDomain(label="overbought", min=50, max=100),
        "oversold": ValueDomain(label="oversold", min=0, max=50),
    }),
    "MACD": MappingProxyType({
        "fast": ValueDomain(label="fast", min=2, max=50),
        "slow": ValueDomain(label="slow", min=2, max=100),
        "signal": ValueDomain(label="signal", min=2, max=50),
    }),
    "Bollinger Bands": MappingProxyType({
        "period": ValueDomain(label="period", min=2, max=100),
        "stdDev": ValueDomain(label="stdDev", min=0.5, max=5),
    }),
    "SMA": MappingProxyType({
        "period": ValueDomain(label="period", min=2, max=500),
    }),
    "EMA": MappingProxyType({
        "period": ValueDomain(label="period", min=2, max=500),
    }),
    "Stochastic": MappingProxyType({
        "kPeriod": ValueDomain(label="kPeriod", min=2, max=100),
        "dPeriod": ValueDomain(label="dPeriod", min=2, max=50),
        "smooth": ValueDomain(label="smooth", min=1, max=10),
    }),
    "ATR": MappingProxyType({
        "period": ValueDomain(label="period", min=2, max=100),
    }),
})

# Composite indicator -> base indicators that must also be active
INDICATOR_DEPENDENCIES: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "RSI Divergence": ("RSI",),
    "MACD Histogram": ("MACD",),
    "Bollinger %B": ("Bollinger Bands",),
    "Price vs SMA": ("SMA",),
})

MOVING_AVERAGE_INDICATORS: FrozenSet[str] = frozenset({"SMA", "EMA"})
MAX_RSI_INSTANCES = 3
MAX_MOVING_AVERAGES = 5
MIN_RSI_BAND_WIDTH = 20

# Advisor field groups
PRICE_FIELDS: FrozenSet[str] = frozenset({"current_price", "price"})
VOLUME_FIELDS: FrozenSet[str] = frozenset({"volume", "volume_ratio"})
RISK_FIELDS: FrozenSet[str] = frozenset({"stop_loss", "safety_line"})
MAX_RULE_CONDITIONS = 10
