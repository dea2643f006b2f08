"""Pydantic models for chart indicator configurations."""

from typing import Dict, List, Union

from pydantic import BaseModel, Field


class IndicatorConfig(BaseModel):
    """
    One active indicator and its parameters.

    Examples:
        - RSI(period=14, overbought=70, oversold=30)
        - MACD(fast=12, slow=26, signal=9)
    """
    name: str = Field(..., description="Indicator name, e.g. 'RSI' or 'Bollinger Bands'")
    params: Dict[str, Union[int, float, str]] = Field(default_factory=dict, description="Indicator parameters")


class IndicatorPreset(BaseModel):
    """A named bundle of indicators for quick chart setup."""
    name: str
    description: str = ""
    indicators: List[IndicatorConfig] = Field(default_factory=list)
