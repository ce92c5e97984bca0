from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from fastapi import APIRouter, Depends, Request
from graphql import GraphQLError
from pydantic import BaseModel

from ..api.schema import schema
from ..errors import APIError
from ..services.registry import Services

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/graphql", tags=["graphql"])


class GraphQLBody(BaseModel):
    # camelCase to match what GraphQL clients send
    query: str
    variables: Optional[Dict[str, Any]] = None
    operationName: Optional[str] = None


def get_services(request: Request) -> Services:
    return request.app.state.services


def format_error(error: GraphQLError) -> Dict[str, Any]:
    """Typed errors keep their message and code; anything else is hidden."""
    out = error.formatted
    original = error.original_error
    if isinstance(original, APIError):
        out["message"] = original.message
        out["extensions"] = original.extensions()
    elif original is not None:
        logger.error("graphql.unhandled_error", path=error.path, error=repr(original))
        out["message"] = "Internal server error"
        out["extensions"] = {"code": 500}
    return out


@router.post("")
async def graphql_endpoint(body: GraphQLBody, services: Services = Depends(get_services)):
    result = await schema.execute_async(
        body.query,
        variable_values=body.variables,
        operation_name=body.operationName,
        context_value={"services": services},
    )
    payload: Dict[str, Any] = {"data": result.data}
    if result.errors:
        payload["errors"] = [format_error(e) for e in result.errors]
    return payload
