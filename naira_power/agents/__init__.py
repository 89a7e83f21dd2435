"""AI Agents package."""

from naira_power.agents.insights import (
    FALLBACK_SUMMARY,
    FALLBACK_TIPS,
    UsageInsightAgent,
    build_prompt,
    fallback_analysis,
    parse_analysis,
    select_recent_logs,
)

__all__ = [
    "FALLBACK_SUMMARY",
    "FALLBACK_TIPS",
    "UsageInsightAgent",
    "build_prompt",
    "fallback_analysis",
    "parse_analysis",
    "select_recent_logs",
]
