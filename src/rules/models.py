"""
Pydantic models for rule condition trees.

These models define the structure of the alert rules built in the rule
builder and checked by the validators before a rule is saved or previewed.
Condition and group nodes are frozen: an edit rebuilds the affected nodes
instead of mutating them, so trees can be shared between templates, rules
and concurrent validation calls.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, List, Tuple, Union
from uuid import uuid4

from pydantic import BaseModel, Field, ConfigDict, computed_field


class ConditionType(str, Enum):
    """Category of market data a condition reads."""
    PRICE = "price"
    INDICATOR = "indicator"
    VOLUME = "volume"
    NEWS = "news"
    PORTFOLIO = "portfolio"


class Operator(str, Enum):
    """Comparison operators for rule conditions."""
    GREATER_THAN = "greater_than"       # field > value
    LESS_THAN = "less_than"             # field < value
    EQUALS = "equals"                   # field == value
    CROSSES_ABOVE = "crosses_above"     # field crosses above value
    CROSSES_BELOW = "crosses_below"     # field crosses below value
    BETWEEN = "between"                 # value < field < value2


class LogicOperator(str, Enum):
    """How a group combines its children."""
    AND = "AND"
    OR = "OR"


class ActionType(str, Enum):
    """Actions a rule can trigger."""
    ALERT = "alert"
    BUY = "buy"
    SELL = "sell"
    NOTIFY = "notify"


class TemplateCategory(str, Enum):
    """Catalog categories for rule templates."""
    MOMENTUM = "momentum"
    REVERSAL = "reversal"
    BREAKOUT = "breakout"
    RISK_MANAGEMENT = "risk_management"
    CUSTOM = "custom"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid4())


class RuleCondition(BaseModel):
    """
    A leaf comparison of one market field against a threshold.

    Examples:
        - RSI less_than 30 (1d)
        - volume_ratio greater_than 1.5
        - current_price between 90 and 110

    ``type``, ``field``, ``operator`` and ``value`` are optional at the model
    level so an incomplete condition coming from a form can still be
    represented and reported by the validator.
    """
    id: str = Field(default_factory=_new_id, description="Unique condition identifier")
    type: Optional[ConditionType] = Field(None, description="Category of the compared field")
    field: Optional[str] = Field(None, description="Field name, e.g. 'RSI' or 'current_price'")
    operator: Optional[Operator] = Field(None, description="Comparison operator")
    value: Optional[Union[int, float, str]] = Field(None, description="Threshold value")
    value2: Optional[Union[int, float]] = Field(None, description="Upper bound for 'between'")
    timeframe: Optional[str] = Field(None, description="Bar timeframe, e.g. '5m', '1h', '1d'")

    def to_display_string(self) -> str:
        """Convert condition to human-readable string."""
        field_str = self.field or "?"
        op = self.operator
        if op == Operator.GREATER_THAN:
            text = f"{field_str} > {self.value}"
        elif op == Operator.LESS_THAN:
            text = f"{field_str} < {self.value}"
        elif op == Operator.EQUALS:
            text = f"{field_str} = {self.value}"
        elif op == Operator.CROSSES_ABOVE:
            text = f"{field_str} crosses above {self.value}"
        elif op == Operator.CROSSES_BELOW:
            text = f"{field_str} crosses below {self.value}"
        elif op == Operator.BETWEEN:
            text = f"{field_str} between {self.value} and {self.value2}"
        else:
            text = f"{field_str} ? {self.value}"

        if self.timeframe:
            text += f" ({self.timeframe})"
        return text

    model_config = ConfigDict(frozen=True, use_enum_values=True)


class RuleGroup(BaseModel):
    """
    A node of the condition tree combining conditions and nested groups
    under AND / OR logic.
    """
    id: str = Field(default_factory=_new_id, description="Unique group identifier")
    logic: Optional[LogicOperator] = Field(None, description="AND / OR")
    conditions: Tuple[RuleCondition, ...] = Field(default_factory=tuple, description="Leaf conditions")
    groups: Tuple["RuleGroup", ...] = Field(default_factory=tuple, description="Nested groups")

    def to_display_string(self) -> str:
        """Render the tree as a single parenthesised expression."""
        parts = [c.to_display_string() for c in self.conditions]
        parts.extend(f"({g.to_display_string()})" for g in self.groups)
        joiner = f" {self.logic or '?'} "
        return joiner.join(parts) if parts else "(empty)"

    model_config = ConfigDict(frozen=True, use_enum_values=True)


class RuleAction(BaseModel):
    """What happens when a rule triggers."""
    type: ActionType = Field(..., description="Action type")
    alert_type: Optional[str] = Field(None, description="Alert flavour, e.g. 'opportunity' or 'protect'")
    message: Optional[str] = Field(None, max_length=500, description="Message shown to the user")
    shares: Optional[float] = Field(None, description="Share count for buy/sell actions")
    limit_price: Optional[float] = Field(None, description="Limit price for buy/sell actions")

    model_config = ConfigDict(frozen=True, use_enum_values=True)


class BacktestSummary(BaseModel):
    """Cached result of the last preview run for a rule."""
    win_rate: float = Field(0.0, ge=0, le=1)
    avg_profit_pct: float = 0.0
    total_triggers: int = Field(0, ge=0)
    period_days: int = Field(0, ge=0)


class Rule(BaseModel):
    """
    A persisted trigger definition pairing a condition tree with actions.

    Owned by the rule storage service; the validators only read
    ``root_group`` and the action list.
    """
    id: str = Field(default_factory=_new_id, description="Unique rule identifier")
    name: str = Field("", max_length=100, description="Human-readable rule name")
    description: str = Field("", max_length=1000, description="Detailed description")
    enabled: bool = Field(True, description="Whether the rule is active")
    symbol: Optional[str] = Field(None, description="Ticker symbol, None for global rules")
    root_group: RuleGroup = Field(..., description="Condition tree")
    actions: List[RuleAction] = Field(default_factory=list, description="Actions to run on trigger")

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
    created_by: Optional[str] = Field(None, description="User ID")
    last_triggered: Optional[datetime] = None
    trigger_count: int = Field(0, ge=0)
    backtest_result: Optional[BacktestSummary] = None

    model_config = ConfigDict(use_enum_values=True)


class RuleTemplate(BaseModel):
    """An immutable, shareable starting point for a new rule."""
    id: str = Field(..., description="Template identifier")
    name: str = Field(..., min_length=1, max_length=100)
    category: TemplateCategory = Field(TemplateCategory.CUSTOM)
    description: str = ""
    root_group: RuleGroup
    actions: Tuple[RuleAction, ...] = Field(default_factory=tuple)
    popularity: int = Field(0, ge=0, le=100)
    avg_win_rate: Optional[float] = Field(None, ge=0, le=1)

    model_config = ConfigDict(frozen=True, use_enum_values=True)


class ValidationResult(BaseModel):
    """
    Verdict shared by every validator.

    ``valid`` is derived: a result is valid exactly when it carries no
    errors and no conflicts. Warnings never affect validity.
    """
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    conflicts: List[str] = Field(default_factory=list)

    @computed_field
    @property
    def valid(self) -> bool:
        return not self.errors and not self.conflicts
