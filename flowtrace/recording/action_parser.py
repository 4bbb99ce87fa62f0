"""Action parser - normalises raw recorded actions.

Malformed actions are returned as data (``validation.errors`` or an
``ActionType.ERROR`` action), never raised, so a single bad action does not
abort the rest of a recording.
"""

from datetime import datetime, timezone
from typing import Any, Iterable, Optional
from urllib.parse import urlparse

import structlog

from .models import Action, ActionType, ActionValidation, Position

logger = structlog.get_logger()

SENSITIVE_KEYWORDS = ("password", "ssn", "credit", "card", "cvv", "pin")


class ActionParseError(ValueError):
    """Raised internally when a raw action cannot be turned into an Action."""


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _raw_get(raw: dict, *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None and value != "":
            return value
    return None


def is_valid_url(url: Optional[str]) -> bool:
    """Check that a URL has a scheme and a network location."""
    if not url:
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return bool(parsed.scheme and parsed.netloc)


def is_sensitive_field(selector: Optional[str]) -> bool:
    """Check whether a selector targets a field holding sensitive data."""
    if not selector:
        return False
    lowered = selector.lower()
    return any(keyword in lowered for keyword in SENSITIVE_KEYWORDS)


def parse_action(raw: dict) -> Action:
    """Parse a raw recorded action into a validated Action.

    Args:
        raw: Action dictionary from the recorder

    Returns:
        Parsed Action. Validation problems are reported in
        ``action.validation``; unparseable input yields an ERROR action.
    """
    try:
        return _parse(raw)
    except (ActionParseError, TypeError, AttributeError) as e:
        logger.warning("Failed to parse action", error=str(e))
        return create_error_action(raw, e)


def _parse(raw: dict) -> Action:
    if not isinstance(raw, dict):
        raise ActionParseError(f"Action must be a mapping, got {type(raw).__name__}")

    action_type = raw.get("type") or "unknown"
    selector = _raw_get(raw, "selector")
    if selector is not None:
        selector = str(selector)
    value = raw.get("value")
    url = _raw_get(raw, "url")
    timestamp = str(raw.get("timestamp") or _now_iso())
    position = Position.from_dict(raw.get("position"))

    if action_type == ActionType.NAVIGATE.value:
        if not url:
            raise ActionParseError("Navigate action missing URL")
        return Action(
            type=ActionType.NAVIGATE,
            timestamp=timestamp,
            url=url,
            description=f"Navigate to {url}",
            validation=ActionValidation(is_valid=is_valid_url(url)),
        )

    if action_type == ActionType.CLICK.value:
        errors = [] if selector else ["Click action missing selector"]
        return Action(
            type=ActionType.CLICK,
            timestamp=timestamp,
            selector=selector,
            description=f"Click {selector or 'unknown element'}",
            validation=ActionValidation(is_valid=not errors, errors=tuple(errors)),
        )

    if action_type == ActionType.FILL.value:
        errors = []
        if not selector:
            errors.append("Fill action missing selector")
        if value is None:
            errors.append("Fill action missing value")
        return Action(
            type=ActionType.FILL,
            timestamp=timestamp,
            selector=selector,
            value=None if value is None else str(value),
            description=f'Fill "{value}" in {selector or "unknown field"}',
            validation=ActionValidation(
                is_valid=not errors,
                errors=tuple(errors),
                is_sensitive=is_sensitive_field(selector),
            ),
        )

    if action_type == ActionType.SELECT.value:
        errors = []
        if not selector:
            errors.append("Select action missing selector")
        if not value:
            errors.append("Select action missing value")
        return Action(
            type=ActionType.SELECT,
            timestamp=timestamp,
            selector=selector,
            value=str(value) if value else None,
            description=f'Select "{value}" in {selector or "unknown dropdown"}',
            validation=ActionValidation(is_valid=not errors, errors=tuple(errors)),
        )

    if action_type == ActionType.SCROLL.value:
        position = position or Position()
        return Action(
            type=ActionType.SCROLL,
            timestamp=timestamp,
            position=position,
            description=f"Scroll to position ({position.x}, {position.y})",
        )

    if action_type == ActionType.HOVER.value:
        errors = [] if selector else ["Hover action missing selector"]
        return Action(
            type=ActionType.HOVER,
            timestamp=timestamp,
            selector=selector,
            description=f"Hover over {selector or 'unknown element'}",
            validation=ActionValidation(is_valid=not errors, errors=tuple(errors)),
        )

    return Action(
        type=ActionType.ERROR,
        timestamp=timestamp,
        selector=selector,
        value=value,
        url=url,
        position=position,
        description=f"{action_type} action",
        validation=ActionValidation(
            is_valid=False,
            errors=(f"Unknown action type: {action_type}",),
        ),
        original_action=raw,
    )


def create_error_action(raw: Any, error: Exception) -> Action:
    """Build the placeholder action returned for unparseable input."""
    return Action(
        type=ActionType.ERROR,
        timestamp=_now_iso(),
        description=f"Parse error: {error}",
        validation=ActionValidation(is_valid=False, errors=(str(error),)),
        original_action=raw if isinstance(raw, dict) else {"raw": raw},
    )


def parse_actions(raws: Iterable[dict]) -> list[Action]:
    """Parse every raw action, preserving order and length."""
    return [parse_action(raw) for raw in raws]


def _parse_timestamp(value: str) -> Optional[datetime]:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def validate_action_sequence(actions: list[Action]) -> dict:
    """Validate an action sequence for ordering and consistency.

    Args:
        actions: Parsed actions in recorded order

    Returns:
        Dict with is_valid, errors, warnings, action_count and time_span_ms
    """
    if not actions:
        return {
            "is_valid": False,
            "errors": ["Action sequence is empty or invalid"],
            "warnings": [],
            "action_count": 0,
            "time_span_ms": 0,
        }

    errors: list[str] = []
    warnings: list[str] = []

    if actions[0].type != ActionType.NAVIGATE:
        warnings.append("Action sequence should typically start with navigation")

    timestamps = [_parse_timestamp(action.timestamp) for action in actions]

    for i in range(1, len(actions)):
        current, previous = timestamps[i], timestamps[i - 1]
        if current is not None and previous is not None and current < previous:
            errors.append(f"Action {i + 1} has timestamp before previous action")

        if actions[i].type == ActionType.FILL and not actions[i].selector:
            errors.append(f"Fill action {i + 1} missing target selector")

    time_span_ms = 0
    if len(actions) >= 2 and timestamps[0] is not None and timestamps[-1] is not None:
        time_span_ms = int((timestamps[-1] - timestamps[0]).total_seconds() * 1000)

    return {
        "is_valid": not errors,
        "errors": errors,
        "warnings": warnings,
        "action_count": len(actions),
        "time_span_ms": time_span_ms,
    }
