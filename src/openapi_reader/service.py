"""Tool-facing service: resolve an operation and render it as text."""

from __future__ import annotations

import logging

from pydantic_core import PydanticSerializationError

from .models import APIDetails, Description, NotFound
from .resolver import OperationResolver

logger = logging.getLogger(__name__)


class ReaderService:
    """
    Answers ``get_api_details`` calls against the loaded description.

    Every outcome is returned as text so the tool call itself always
    succeeds:
    - a match renders as indented JSON
    - an unknown operationId renders as a sentence naming it
    - a projection that cannot be encoded renders as a sentence naming the error
    """

    def __init__(self, description: Description) -> None:
        self.resolver = OperationResolver(description)

    def get_api_details(self, operation_id: str) -> str:
        logger.info("Looking up operation_id=%s", operation_id)
        result = self.resolver.find_operation_details(operation_id)

        if isinstance(result, NotFound):
            logger.warning("Operation not found: %s", operation_id)
            return result.message

        return self._format_result(result)

    def _format_result(self, details: APIDetails) -> str:
        try:
            return details.to_json()
        except (PydanticSerializationError, TypeError, ValueError) as exc:
            logger.error("Failed to encode operation %s: %s", details.operation_id, exc)
            return self._format_error(exc)

    def _format_error(self, exc: Exception) -> str:
        return f"Failed to marshal API details: {exc}"
