from __future__ import annotations

from typing import Any, Iterator, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from src.api.schemas import RulePreviewPayload, RulePreviewResult, SuggestionsResponse
from src.config.settings import get_settings
from src.rules.advisor import suggest_improvements
from src.rules.models import RuleTemplate, ValidationResult
from src.rules.preview import PreviewClient, RuleNotValidError, RulePreviewError, get_preview_client
from src.rules.serialization import parse_rule_group
from src.rules.templates import get_rule_template, get_rule_templates
from src.rules.validator import validate_rule_group
from src.utils.logger import get_logger


router = APIRouter(tags=["rules"])
logger = get_logger(__name__)


def _preview_client(client: PreviewClient = Depends(get_preview_client)) -> Iterator[PreviewClient]:
    try:
        yield client
    finally:
        client.close()


@router.post("/rules/validate", response_model=ValidationResult)
def validate_rules(
    group: Any = Body(...),
    max_nesting: Optional[int] = Query(None, ge=0, le=10),
) -> ValidationResult:
    if max_nesting is None:
        max_nesting = get_settings().rules.max_nesting
    result = validate_rule_group(group, max_nesting)
    logger.info(
        f"Rule validation: valid={result.valid} errors={len(result.errors)} "
        f"warnings={len(result.warnings)} conflicts={len(result.conflicts)}"
    )
    return result


@router.post("/rules/suggestions", response_model=SuggestionsResponse)
def rule_suggestions(group: Any = Body(...)) -> SuggestionsResponse:
    parsed, errors = parse_rule_group(group)
    if parsed is None:
        raise HTTPException(status_code=400, detail=ValidationResult(errors=errors).model_dump())
    return SuggestionsResponse(suggestions=suggest_improvements(parsed))


@router.post("/rules/preview", response_model=RulePreviewResult)
def preview_rule(
    payload: RulePreviewPayload,
    client: PreviewClient = Depends(_preview_client),
) -> RulePreviewResult:
    group, errors = parse_rule_group(payload.root_group)
    if group is None:
        raise HTTPException(status_code=400, detail=ValidationResult(errors=errors).model_dump())

    settings = get_settings()
    lookback_days = payload.lookback_days or settings.rules.default_lookback_days
    try:
        validation, preview = client.preview_rule(
            payload.symbol,
            group,
            lookback_days=lookback_days,
            max_nesting=settings.rules.max_nesting,
        )
    except RuleNotValidError as e:
        raise HTTPException(status_code=400, detail=e.result.model_dump())
    except RulePreviewError as e:
        logger.error(f"Rule preview failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    return RulePreviewResult(validation=validation, preview=preview)


@router.get("/rules/templates", response_model=List[RuleTemplate])
def list_templates(category: Optional[str] = None) -> List[RuleTemplate]:
    return get_rule_templates(category)


@router.get("/rules/templates/{template_id}", response_model=RuleTemplate)
def get_template(template_id: str) -> RuleTemplate:
    template = get_rule_template(template_id)
    if template is None:
        raise HTTPException(status_code=404, detail="template not found")
    return template
