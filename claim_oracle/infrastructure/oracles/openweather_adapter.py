"""OpenWeatherMap implementation of the weather provider interface."""

from typing import List, Optional

import httpx
from pydantic import BaseModel, Field, ValidationError

from ...domain.ports.oracle_provider import OracleDecodeError, OracleUnavailableError, WeatherProvider
from .http_oracle import HttpOracleAdapter


class OpenWeatherConfig(BaseModel):
    """Configuration for OpenWeatherMap adapter."""

    api_key: Optional[str] = None
    base_url: str = "https://api.openweathermap.org/data/2.5"
    timeout: float = 10.0
    samples: int = Field(default=16, description="3-hour forecast steps; 16 covers 48 hours")


class ForecastStep(BaseModel):
    pop: float = Field(default=0.0, ge=0.0, le=1.0, description="Probability of precipitation")


class ForecastResponse(BaseModel):
    steps: List[ForecastStep] = Field(default_factory=list, alias="list")


class OpenWeatherAdapter(HttpOracleAdapter, WeatherProvider):
    """Precipitation probabilities from the 5-day / 3-hour forecast."""

    def __init__(
        self,
        config: Optional[OpenWeatherConfig] = None,
        provider_name: str = "OpenWeatherMap",
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._config = config or OpenWeatherConfig()
        super().__init__(
            base_url=self._config.base_url,
            timeout=self._config.timeout,
            provider_name=provider_name,
            client=client,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self._config.api_key)

    async def get_precipitation_probabilities(self, location: str) -> List[float]:
        if not self.is_configured:
            raise OracleUnavailableError(self.provider_name, "API key not configured")

        data = await self._request_json(
            "GET",
            "/forecast",
            params={
                "q": location,
                "appid": self._config.api_key,
                "units": "metric",
                "cnt": self._config.samples,
            },
        )
        try:
            forecast = ForecastResponse.model_validate(data)
        except ValidationError as e:
            raise OracleDecodeError(self.provider_name, f"unexpected forecast shape: {e}")
        return [step.pop for step in forecast.steps]
