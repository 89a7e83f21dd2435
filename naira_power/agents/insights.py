"""
Usage Insight Agent

Asks Gemini for a short reading of a family's recent recharges: is spending
going up, down or holding steady, and three ways to spend less.

CRITICAL BOUNDARIES:
- CAN: Summarize the logs it is given and suggest saving tips
- CANNOT: Change any stored data
- NEVER raises: a missing key, a network failure or a malformed reply
  all produce the same fixed fallback, and the failure is logged

The LLM is an ADVISOR, not a source of figures.
Totals and averages shown to the family come from queries.stats.
"""

import json
from typing import Any, Optional, Sequence

import google.generativeai as genai

from naira_power.audit import AuditLogger, get_logger
from naira_power.config import GeminiSettings, get_settings
from naira_power.models.household import AnalysisResult, UtilityLog


FALLBACK_SUMMARY = (
    "Could not generate analysis at this time. Please ensure your API Key is valid."
)
FALLBACK_TIPS = [
    "Check insulation",
    "Turn off unused lights",
    "Service AC units regularly",
]


def fallback_analysis() -> AnalysisResult:
    """The fixed result shown whenever the AI cannot be used."""
    return AnalysisResult(summary=FALLBACK_SUMMARY, tips=list(FALLBACK_TIPS))


def select_recent_logs(
    logs: Sequence[UtilityLog],
    window: int = 10,
) -> list[UtilityLog]:
    """Oldest-to-newest by recharge date, keeping only the last ``window``."""
    ordered = sorted(logs, key=lambda log: log.date)
    return ordered[-window:] if window > 0 else []


def build_prompt(logs: Sequence[UtilityLog]) -> str:
    """Prompt asking for a trend summary and exactly three tips."""
    data = json.dumps(
        [log.model_dump(mode="json") for log in logs],
        indent=2,
    )

    return f"""You are an energy efficiency expert for a household in Nigeria.
Below is the recent history of prepaid electricity recharges.
Currency is Naira (NGN). Units are kWh.

Data:
{data}

Analyze this data and provide:
1. A brief summary of the spending trend (increasing, decreasing, or stable).
2. Exactly 3 actionable tips to save costs based on the usage pattern
   (or general best practices if there is little data).

Respond with ONLY a JSON object in this exact format:
{{"summary": "brief summary", "tips": ["tip one", "tip two", "tip three"]}}"""


def parse_analysis(text: str) -> AnalysisResult:
    """
    Extract and validate the JSON object in a model reply.

    Raises:
        ValueError: If the reply holds no JSON object or it fails validation
    """
    text = text.strip()
    start = text.find("{")
    end = text.rfind("}") + 1
    if start < 0 or end <= start:
        raise ValueError("No JSON object in AI response")

    # pydantic's ValidationError is a ValueError
    return AnalysisResult.model_validate_json(text[start:end])


class UsageInsightAgent:
    """
    AI agent for the usage insight panel.

    RESPONSIBILITIES:
    - Pick the most recent logs and send them for analysis
    - Validate the reply's shape (a summary and three tips)
    - Fall back to a static result on any failure

    BOUNDARIES:
    - NEVER persists data
    - NEVER retries
    """

    def __init__(
        self,
        model: Optional[Any] = None,
        settings: Optional[GeminiSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
        log_window: int = 10,
    ):
        """
        Args:
            model: Object with an async ``generate_content_async(prompt)``.
                   When None, a Gemini model is configured on first use.
            settings: Gemini settings; read from the environment when None.
        """
        self._model = model
        self._settings = settings
        self._audit_logger = audit_logger
        self._log_window = log_window
        self._logger = get_logger("naira_power.agents.insights")

    def _get_model(self) -> Any:
        """Configure Google Generative AI on first use."""
        if self._model is None:
            settings = self._settings or get_settings().gemini
            genai.configure(api_key=settings.api_key)
            self._model = genai.GenerativeModel(
                model_name=settings.model_name,
                generation_config={
                    "temperature": settings.temperature,
                    "max_output_tokens": settings.max_tokens,
                    "response_mime_type": "application/json",
                },
            )
        return self._model

    async def analyze_usage(
        self,
        logs: Sequence[UtilityLog],
        family_id: Optional[str] = None,
    ) -> AnalysisResult:
        """
        Summarize recent usage and suggest three tips.

        Always returns a result; failures yield ``fallback_analysis()``.
        """
        recent = select_recent_logs(logs, self._log_window)

        try:
            model = self._get_model()
            response = await model.generate_content_async(build_prompt(recent))
            text = response.text
            if not text:
                raise ValueError("No response from AI")
            result = parse_analysis(text)
        except Exception as e:
            self._logger.warning(
                "usage_insight_failed",
                error=str(e),
                error_type=type(e).__name__,
                family_id=family_id,
            )
            if self._audit_logger:
                self._audit_logger.log_insight_fallback(family_id, str(e))
            return fallback_analysis()

        if self._audit_logger:
            self._audit_logger.log_insight_generated(family_id, len(recent))

        return result
