"""AI-assisted parameter suggestions.

The calculator never depends on this module. Suggestions are returned to the
caller, who decides whether to apply them.
"""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, List, Optional, Protocol

import openai
from fastapi import Depends

from .config import Settings, get_settings
from .constants import AI_SUGGESTION_ERROR, BANDWIDTH_MHZ_RANGE, DISTANCE_M_RANGE, NOISE_LEVEL_DBM_RANGE
from .models import Modulation, SuggestionRequest, SuggestionResponse

logger = logging.getLogger(__name__)


class SuggestionError(Exception):
    """Suggestion could not be produced; safe to retry."""

    def __init__(self, message: str = AI_SUGGESTION_ERROR) -> None:
        super().__init__(message)


class ParameterSuggester(Protocol):
    def suggest(self, request: SuggestionRequest) -> SuggestionResponse:
        ...


SYSTEM_PROMPT = (
    "You are an AI assistant specialized in suggesting optimal simulation "
    "parameters for 4G/5G network link simulations. Answer with a single JSON "
    "object and nothing else."
)


def build_prompt(request: SuggestionRequest) -> str:
    modulations = ", ".join(m.value for m in Modulation)
    lines: List[str] = [
        f"Network type: {request.network_type.value}",
        f"Goal: {request.goal}",
        f"User constraints: {request.user_constraints or 'none'}",
        "",
        "Consider the interdependencies between parameters and suggest values that are "
        "typical and possible in the 4G/5G landscape for this network type and goal.",
        f"- modulation: one of {modulations}",
        f"- bandwidth in MHz, between {BANDWIDTH_MHZ_RANGE[0]:g} and {BANDWIDTH_MHZ_RANGE[1]:g}",
        f"- distance in meters, between {DISTANCE_M_RANGE[0]:g} and {DISTANCE_M_RANGE[1]:g}",
        f"- noise_level in dBm, between {NOISE_LEVEL_DBM_RANGE[0]:g} and {NOISE_LEVEL_DBM_RANGE[1]:g}",
        "",
        "Return this JSON shape, with a short reasoning covering each parameter:",
        '{"suggested_parameters": {"modulation": "", "bandwidth": 0, "distance": 0, '
        '"noise_level": 0}, "reasoning": ""}',
    ]
    return "\n".join(lines)


def _strip_fences(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()


def parse_suggestion(content: Optional[str]) -> SuggestionResponse:
    if not content:
        raise ValueError("Empty response from model")
    return SuggestionResponse.model_validate_json(_strip_fences(content))


class OpenAISuggester:
    """Suggester backed by an OpenAI-compatible chat completions endpoint."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gpt-4o-mini",
        base_url: Optional[str] = None,
        timeout_s: float = 30.0,
        client: Any = None,
    ) -> None:
        self.model = model
        # No automatic retries; the user retries by asking again
        self._client = client or openai.OpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_s,
            max_retries=0,
        )

    def suggest(self, request: SuggestionRequest) -> SuggestionResponse:
        try:
            completion = self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_prompt(request)},
                ],
                response_format={"type": "json_object"},
                temperature=0.2,
            )
            result = parse_suggestion(completion.choices[0].message.content)
        except Exception as exc:
            logger.error("AI suggestion failed: %s", exc, exc_info=True)
            raise SuggestionError() from exc

        logger.info(
            "AI suggestion for %s (%s): %s",
            request.network_type.value,
            request.goal,
            result.suggested_parameters.modulation,
        )
        return result


@lru_cache(maxsize=4)
def _cached_suggester(api_key: str, model: str, base_url: Optional[str], timeout_s: float) -> OpenAISuggester:
    return OpenAISuggester(api_key=api_key, model=model, base_url=base_url, timeout_s=timeout_s)


class UnconfiguredSuggester:
    """Stands in when no API key is set; fails only once a valid request arrives."""

    def suggest(self, request: SuggestionRequest) -> SuggestionResponse:
        logger.warning("AI suggestion requested but AI_API_KEY is not configured")
        raise SuggestionError()


def get_suggester(settings: Settings = Depends(get_settings)) -> ParameterSuggester:
    """FastAPI dependency returning the configured suggester."""
    if not settings.AI_API_KEY:
        return UnconfiguredSuggester()
    return _cached_suggester(settings.AI_API_KEY, settings.AI_MODEL, settings.AI_BASE_URL, settings.AI_TIMEOUT_S)
