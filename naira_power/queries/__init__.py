"""Usage statistics package."""

from naira_power.queries.stats import compute_usage_stats

__all__ = ["compute_usage_stats"]
