"""Operation lookup and projection."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from .models import (
    APIDetails,
    Description,
    NotFound,
    Operation,
    ParameterDetails,
    RequestBodyDetails,
)


class OperationResolver:
    def __init__(self, description: Description) -> None:
        self.description = description

    def find_operation_details(self, operation_id: str) -> Union[APIDetails, NotFound]:
        # Paths are scanned in document order; the first matching verb wins.
        for path, path_item in self.description.paths.items():
            for method, operation in path_item.operations():
                if operation.operation_id == operation_id:
                    return self._project(operation, method, path)
        return NotFound(operation_id)

    def _project(self, operation: Operation, method: str, path: str) -> APIDetails:
        return APIDetails(
            operation_id=operation.operation_id or "",
            method=method,
            path=path,
            summary=operation.summary or None,
            description=operation.description or None,
            parameters=self._project_parameters(operation),
            request_body=self._project_request_body(operation),
            responses=self._project_responses(operation),
        )

    def _project_parameters(self, operation: Operation) -> Optional[List[ParameterDetails]]:
        parameters = [
            ParameterDetails(
                name=parameter.name,
                location=parameter.location,
                required=parameter.required,
                description=parameter.description,
                schema_=parameter.schema,
            )
            for parameter in operation.parameters
        ]
        return parameters or None

    def _project_request_body(self, operation: Operation) -> Optional[RequestBodyDetails]:
        body = operation.request_body
        if body is None:
            return None
        return RequestBodyDetails(
            description=body.description,
            required=body.required,
            content=dict(body.content) or None,
        )

    def _project_responses(self, operation: Operation) -> Optional[Dict[str, Any]]:
        responses = {
            status: response
            for status, response in operation.responses.items()
            if response is not None
        }
        return responses or None
