"""Unit tests for the stub bearer auth dependency."""

import pytest
from fastapi import HTTPException

from backend.app.api.auth import get_current_context


@pytest.mark.asyncio
async def test_bearer_token_is_the_user_id() -> None:
    ctx = await get_current_context(authorization="Bearer tourist-1")
    assert ctx.user_id == "tourist-1"


@pytest.mark.asyncio
async def test_missing_header_is_rejected() -> None:
    with pytest.raises(HTTPException) as exc_info:
        await get_current_context(authorization=None)
    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_invalid_bearer_format() -> None:
    with pytest.raises(HTTPException) as exc_info:
        await get_current_context(authorization="NotBearer token")

    assert exc_info.value.status_code == 401
    assert "Invalid authorization header format" in exc_info.value.detail


@pytest.mark.asyncio
async def test_empty_token() -> None:
    with pytest.raises(HTTPException) as exc_info:
        await get_current_context(authorization="Bearer   ")
    assert exc_info.value.status_code == 401
