"""
Intake of layouts produced by an external generator.

The generator replies with free text that embeds a JSON layout, or with
the JSON itself.  The layout is only handed on once it validates; a bad
reply never touches session state.
"""

import json
import logging
import re
from typing import Optional, Union

from pydantic import ValidationError

from schemas import Layout

logger = logging.getLogger(__name__)


class LayoutIntakeError(ValueError):
    """Generator reply did not contain a valid layout."""


def extract_json_from_response(text: str) -> Optional[dict]:
    """Extract the JSON object from generator reply text."""
    # ```json fenced block first
    fenced = re.search(r"```(?:json)?\s*(.*?)\s*```", text, re.DOTALL)
    if fenced:
        try:
            return json.loads(fenced.group(1))
        except json.JSONDecodeError:
            pass

    # then the outermost braces
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        try:
            return json.loads(text[start:end + 1])
        except json.JSONDecodeError:
            pass

    return None


def parse_layout(payload: Union[dict, str]) -> Layout:
    """
    Validate a generator payload into a ``Layout``.

    Accepts the layout dict, a ``{"layout": {...}}`` wrapper, or reply text.
    Raises ``LayoutIntakeError`` when no valid layout can be recovered.
    """
    data = payload
    if isinstance(payload, str):
        data = extract_json_from_response(payload)
        if data is None:
            raise LayoutIntakeError("No JSON object found in generator reply")

    if not isinstance(data, dict):
        raise LayoutIntakeError("Layout payload must be a JSON object")
    if "layout" in data and isinstance(data["layout"], dict):
        data = data["layout"]

    try:
        layout = Layout.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Rejected generator layout: {e.error_count()} validation error(s)")
        raise LayoutIntakeError(f"Invalid layout: {e.errors(include_url=False)}") from e

    logger.info(f"Accepted generator layout '{layout.name}' with {len(layout.zones)} zones")
    return layout
