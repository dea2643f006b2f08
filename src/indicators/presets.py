"""Sample indicator presets for quick chart setup."""

from typing import List

from .models import IndicatorConfig, IndicatorPreset


def _rsi() -> IndicatorConfig:
    return IndicatorConfig(name="RSI", params={"period": 14, "overbought": 70, "oversold": 30})


def _macd() -> IndicatorConfig:
    return IndicatorConfig(name="MACD", params={"fast": 12, "slow": 26, "signal": 9})


def _bollinger() -> IndicatorConfig:
    return IndicatorConfig(name="Bollinger Bands", params={"period": 20, "stdDev": 2})


def get_sample_presets() -> List[IndicatorPreset]:
    """Return the built-in presets. A new list is built on every call."""
    return [
        IndicatorPreset(
            name="Momentum Trader",
            description="Fast-moving momentum indicators for day trading",
            indicators=[
                _rsi(),
                _macd(),
                IndicatorConfig(name="EMA", params={"period": 9}),
            ],
        ),
        IndicatorPreset(
            name="Trend Follower",
            description="Trend-following indicators for swing trading",
            indicators=[
                IndicatorConfig(name="SMA", params={"period": 50}),
                IndicatorConfig(name="SMA", params={"period": 200}),
                _macd(),
                IndicatorConfig(name="ATR", params={"period": 14}),
            ],
        ),
        IndicatorPreset(
            name="Mean Reversion",
            description="Identify overbought/oversold conditions",
            indicators=[
                _bollinger(),
                _rsi(),
                IndicatorConfig(name="Stochastic", params={"kPeriod": 14, "dPeriod": 3, "smooth": 3}),
            ],
        ),
        IndicatorPreset(
            name="Volatility Tracker",
            description="Monitor market volatility and price ranges",
            indicators=[
                _bollinger(),
                IndicatorConfig(name="ATR", params={"period": 14}),
                IndicatorConfig(name="EMA", params={"period": 20}),
            ],
        ),
        IndicatorPreset(
            name="Classic Setup",
            description="Traditional technical analysis indicators",
            indicators=[
                IndicatorConfig(name="SMA", params={"period": 20}),
                IndicatorConfig(name="SMA", params={"period": 50}),
                _rsi(),
                IndicatorConfig(name="Volume", params={"period": 20}),
            ],
        ),
    ]
