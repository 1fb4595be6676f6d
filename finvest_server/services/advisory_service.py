"""Portfolio advisory generation backed by the text model."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from finvest_server.portfolio.intelligence import (
    ADVICE_EMPTY,
    ADVICE_UNAVAILABLE,
    ADVISOR_SYSTEM_INSTRUCTION,
    build_advice_prompt,
)
from finvest_server.portfolio.models import Asset, PortfolioSummary
from finvest_server.providers.gemini_client import GeminiClient, extract_text

LOGGER = logging.getLogger(__name__)


class AdvisoryService:
    def __init__(self, client_factory: Callable[[], GeminiClient], model: str, currency: str = "BRL") -> None:
        self._client_factory = client_factory
        self.model = model
        self.currency = currency

    def _generate(self, prompt: str) -> str | None:
        client = self._client_factory()
        response = client.generate_content(
            self.model,
            [{"text": prompt}],
            system_instruction=ADVISOR_SYSTEM_INSTRUCTION,
        )
        return extract_text(response)

    async def get_financial_advice(self, assets: list[Asset], summary: PortfolioSummary) -> str:
        """Return advice prose; failures degrade to a displayable fallback string."""
        prompt = build_advice_prompt(assets, summary, self.currency)
        try:
            text = await asyncio.to_thread(self._generate, prompt)
        except Exception as error:
            LOGGER.warning("advisory generation failed: model=%s error=%s", self.model, error)
            return ADVICE_UNAVAILABLE
        return text or ADVICE_EMPTY
