"""
Shared API dependencies and the envelope response helper.

Every route answers with the operation envelope:

    {"success": bool, "data": ..., "message": ..., "error": ..., "error_kind": ...}

The HTTP status follows ``error_kind`` (see ``ERROR_STATUS_CODES``).
"""

from typing import Any, Optional

from fastapi import Depends, Header, HTTPException, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import TypeAdapter

from pulsehustle.auth import bearer_token
from pulsehustle.errors import ERROR_STATUS_CODES, AuthenticationError
from pulsehustle.platform import Platform, get_platform
from pulsehustle.services.operations import OperationResult


def respond(result: OperationResult, schema: Any = None, status_code: int = 200) -> JSONResponse:
    data = result.data
    if result.success and schema is not None and data is not None:
        adapter = TypeAdapter(schema)
        data = adapter.dump_python(adapter.validate_python(data, from_attributes=True), mode="json")

    content = {
        "success": result.success,
        "data": data,
        "message": result.message,
        "error": result.error,
        "error_kind": result.error_kind,
    }
    if not result.success:
        status_code = ERROR_STATUS_CODES.get(result.error_kind, 500)
    return JSONResponse(content=jsonable_encoder(content), status_code=status_code)


async def get_access_token(authorization: Optional[str] = Header(None)) -> Optional[str]:
    return bearer_token(authorization)


async def get_current_user_id(
    token: Optional[str] = Depends(get_access_token),
    platform: Platform = Depends(get_platform),
) -> Optional[str]:
    """Acting user from an optional bearer token; None when anonymous."""
    if not token:
        return None
    try:
        user = await platform.auth.get_user(token)
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
        )
    return user.id
