"""
Parsing and validation of advisory replies.

The advisory model answers in free text that usually wraps one JSON object
in prose or Markdown code fences. parse_json_object extracts that object
(all-or-nothing); validate_assignment_plan checks it against the assignment
schema and returns a ValidationResult instead of raising, so the engine's
fallback decision is an explicit branch.
"""

import json
import logging
from typing import Any, Dict

from pydantic import ValidationError

from taskforce.errors import MalformedResponse
from taskforce.models.advisory import AdvisoryPlan
from taskforce.models.outputs import ErrorInfo, ValidationResult

logger = logging.getLogger(__name__)


def parse_json_object(raw: str) -> Dict[str, Any]:
    """
    Extract the JSON object spanning the first "{" to the last "}" in raw.

    Args:
        raw: Advisory reply text

    Returns:
        Parsed JSON object

    Raises:
        MalformedResponse: no brace span, invalid JSON, or a non-object value
    """
    text = raw or ""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        logger.error(f"No JSON object in advisory reply: {text[:200]!r}")
        raise MalformedResponse("No JSON object found", text)

    try:
        parsed = json.loads(text[start:end + 1])
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in advisory reply: {text[:200]!r}")
        raise MalformedResponse(f"Invalid JSON ({e.msg})", text) from e

    if not isinstance(parsed, dict):
        raise MalformedResponse("JSON value is not an object", text)
    return parsed


def _structural_errors(data: Dict[str, Any]) -> list:
    errors = []
    complexity = data.get("taskComplexity")
    if not isinstance(complexity, dict) or not complexity.get("difficultyScore"):
        errors.append("taskComplexity.difficultyScore is missing")
    if not isinstance(data.get("inferredSkills"), list):
        errors.append("inferredSkills is not an array")
    assignments = data.get("assignments")
    if not isinstance(assignments, list) or not assignments:
        errors.append("assignments is empty")
    return errors


def validate_assignment_plan(data: Dict[str, Any]) -> ValidationResult:
    """
    Check a parsed reply for a usable assignment plan.

    A plan needs a non-empty difficulty score, an inferredSkills array and a
    non-empty assignments array; every assignment must also fit the schema.
    """
    errors = _structural_errors(data)
    if errors:
        return ValidationResult.create_failure(
            ErrorInfo(code="INCOMPLETE_PLAN", message="; ".join(errors))
        )

    try:
        plan = AdvisoryPlan.model_validate(data)
    except ValidationError as e:
        return ValidationResult.create_failure(
            ErrorInfo(
                code="SCHEMA_INVALID",
                message=f"{e.error_count()} schema error(s) in advisory plan",
                details={"errors": e.errors(include_url=False, include_context=False)},
            )
        )
    return ValidationResult.create_success(plan)


def parse_assignment_reply(raw: str) -> ValidationResult:
    """Parse and validate an assignment reply in one step."""
    try:
        data = parse_json_object(raw)
    except MalformedResponse as e:
        return ValidationResult.create_failure(
            ErrorInfo(code="MALFORMED_RESPONSE", message=str(e), details={"excerpt": e.excerpt})
        )
    return validate_assignment_plan(data)
