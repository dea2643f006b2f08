from __future__ import annotations

from typing import List

from fastapi import APIRouter

from src.api.schemas import DependencyHintsResponse, IndicatorSetRequest
from src.indicators.models import IndicatorPreset
from src.indicators.presets import get_sample_presets
from src.indicators.validator import get_dependency_hints, validate_indicator_set
from src.rules.models import ValidationResult
from src.rules.semantics import INDICATOR_DEPENDENCIES


router = APIRouter(tags=["indicators"])


@router.post("/indicators/validate", response_model=ValidationResult)
def validate_indicators(payload: IndicatorSetRequest) -> ValidationResult:
    return validate_indicator_set(payload.indicators)


@router.get("/indicators/presets", response_model=List[IndicatorPreset])
def list_presets() -> List[IndicatorPreset]:
    return get_sample_presets()


@router.get("/indicators/{name}/dependencies", response_model=DependencyHintsResponse)
def indicator_dependencies(name: str) -> DependencyHintsResponse:
    return DependencyHintsResponse(
        indicator=name,
        dependencies=list(INDICATOR_DEPENDENCIES.get(name, ())),
        hints=get_dependency_hints(name),
    )
