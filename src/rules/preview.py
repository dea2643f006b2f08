"""
Client for the external backtest/preview service.

The service simulates a rule against historical data and reports trigger
statistics. Trees are validated locally before anything is sent; the
service's own warnings and conflicts share the validator's string format
so both can be merged into one list for display.
"""

from typing import Dict, List, Optional, Tuple

import requests
from pydantic import BaseModel, Field, ValidationError

from src.config.settings import get_settings
from src.utils import get_logger

from .models import RuleGroup, ValidationResult
from .validator import DEFAULT_MAX_NESTING, validate_rule_group


logger = get_logger(__name__)


class RulePreviewError(Exception):
    """Raised when the preview service cannot be reached or answers badly."""
    pass


class RuleNotValidError(Exception):
    """Raised when a rule tree fails validation and is not sent for preview."""

    def __init__(self, result: ValidationResult):
        self.result = result
        problems = result.errors + result.conflicts
        super().__init__(f"Rule is not valid: {'; '.join(problems)}")


class RulePreviewRequest(BaseModel):
    symbol: str = Field(..., min_length=1)
    root_group: RuleGroup
    lookback_days: int = Field(30, ge=1, le=3650)


class BacktestStats(BaseModel):
    total_triggers: int = 0
    win_rate: float = 0.0
    avg_profit_pct: float = 0.0
    max_profit_pct: float = 0.0
    max_loss_pct: float = 0.0
    profitable_triggers: int = 0


class SampleTrigger(BaseModel):
    timestamp: str
    price: float
    condition_values: Dict[str, float] = Field(default_factory=dict)
    would_execute: bool = False


class RulePreviewResponse(BaseModel):
    total_triggers: int = 0
    sample_triggers: List[SampleTrigger] = Field(default_factory=list)
    backtest_stats: BacktestStats = Field(default_factory=BacktestStats)
    validation_warnings: List[str] = Field(default_factory=list)
    conflicts: List[str] = Field(default_factory=list)


def _merge_unique(existing: List[str], extra: List[str]) -> List[str]:
    merged = list(existing)
    for item in extra:
        if item not in merged:
            merged.append(item)
    return merged


def merge_preview_feedback(result: ValidationResult, response: RulePreviewResponse) -> ValidationResult:
    """
    Merge the preview service's warnings and conflicts into a local result.

    Order is preserved and duplicates are dropped.
    """
    return ValidationResult(
        errors=list(result.errors),
        warnings=_merge_unique(result.warnings, response.validation_warnings),
        conflicts=_merge_unique(result.conflicts, response.conflicts),
    )


class PreviewClient:
    """HTTP client for the rule preview endpoint."""

    PREVIEW_PATH = "/api/rules/preview"

    def __init__(
        self,
        base_url: str,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._owns_session = session is None
        self.session = session or requests.Session()

    def close(self) -> None:
        """Close the HTTP session, unless it was handed in by the caller."""
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "PreviewClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def preview(self, request: RulePreviewRequest) -> RulePreviewResponse:
        """
        Send a preview request as-is.

        Raises:
            RulePreviewError: On transport errors, HTTP errors or bad payloads
        """
        url = f"{self.base_url}{self.PREVIEW_PATH}"
        try:
            response = self.session.post(url, json=request.model_dump(mode="json"), timeout=self.timeout)
            response.raise_for_status()
            return RulePreviewResponse.model_validate(response.json())
        except requests.RequestException as e:
            raise RulePreviewError(f"Preview request to {url} failed: {e}") from e
        except (ValueError, ValidationError) as e:
            raise RulePreviewError(f"Invalid preview response from {url}: {e}") from e

    def preview_rule(
        self,
        symbol: str,
        group: RuleGroup,
        lookback_days: int = 30,
        max_nesting: int = DEFAULT_MAX_NESTING,
    ) -> Tuple[ValidationResult, RulePreviewResponse]:
        """
        Validate a rule tree, then preview it.

        Returns:
            Tuple of (merged validation result, preview response)

        Raises:
            RuleNotValidError: If the tree is not valid (nothing is sent)
            RulePreviewError: If the preview service fails
        """
        result = validate_rule_group(group, max_nesting)
        if not result.valid:
            raise RuleNotValidError(result)

        request = RulePreviewRequest(symbol=symbol.upper(), root_group=group, lookback_days=lookback_days)
        logger.info(f"Requesting preview for {request.symbol} over {lookback_days} days")
        response = self.preview(request)
        return merge_preview_feedback(result, response), response


def get_preview_client() -> PreviewClient:
    """Build a PreviewClient from the current settings. Callers close it when done."""
    rules_config = get_settings().rules
    return PreviewClient(rules_config.preview_url, timeout=rules_config.preview_timeout)
