"""
Logging helpers for the canary component.

Canary environment variables routinely carry API keys for the monitored
site, so the desired configuration is logged through masked_config(), which
keeps variable names visible and hides their values.
"""

from typing import Any

from synthetics_canary.models import CanaryConfig

MASK = "***"

# Longer error messages are cut so one summary stays one log line
MAX_ERROR_LENGTH = 500


def mask_env(env: dict[str, str] | None) -> dict[str, str]:
    """Return the environment variable names with every value masked."""
    return {name: MASK for name in (env or {})}


def masked_config(config: CanaryConfig) -> dict[str, Any]:
    """
    Return the configuration as a plain dict that is safe to log.

    Example:
        ```python
        logger.info(f"Reconciling canary: {masked_config(config)}")
        # Logs: {"name": "c1", "env": {"API_KEY": "***"}, ...}
        ```
    """
    data = config.to_dict()
    data["env"] = mask_env(config.env)
    return data


def log_summary(
    operation: str,
    *,
    success: bool = True,
    duration_ms: float | None = None,
    item_count: int | None = None,
    error: str | None = None,
    **fields: str | int | float | bool | None,
) -> dict[str, Any]:
    """
    Create a structured log record for one lifecycle verb.

    Args:
        operation: Verb name (e.g., "deploy", "remove")
        success: Whether the verb succeeded
        duration_ms: Optional duration in milliseconds
        item_count: Optional number of runs returned
        error: Optional error message, truncated to MAX_ERROR_LENGTH
        **fields: Extra scalar fields such as canary_name; None values are dropped

    Returns:
        Dictionary suitable for structured logging
    """
    summary: dict[str, Any] = {
        "operation": operation,
        "success": success,
    }

    if duration_ms is not None:
        summary["duration_ms"] = round(duration_ms, 2)

    if item_count is not None:
        summary["item_count"] = item_count

    if error:
        summary["error"] = error[:MAX_ERROR_LENGTH]

    summary.update({key: value for key, value in fields.items() if value is not None})
    return summary
