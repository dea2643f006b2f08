from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from src.rules.models import ValidationResult
from src.rules.preview import RulePreviewResponse


class SuggestionsResponse(BaseModel):
    suggestions: List[str]


class RulePreviewPayload(BaseModel):
    symbol: str = Field(..., min_length=1)
    root_group: Dict[str, Any]
    lookback_days: Optional[int] = Field(None, ge=1, le=3650)


class RulePreviewResult(BaseModel):
    validation: ValidationResult
    preview: RulePreviewResponse


class IndicatorSetRequest(BaseModel):
    indicators: List[Any]


class DependencyHintsResponse(BaseModel):
    indicator: str
    dependencies: List[str]
    hints: List[str]


class LogsResponse(BaseModel):
    logs: List[str]
