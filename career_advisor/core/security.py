from __future__ import annotations

from fastapi import HTTPException, status

from career_advisor.core.config import settings


def check_api_key(x_api_key: str | None) -> None:
    """Guard operator endpoints. Without API_KEY configured they are disabled, not open."""
    if not settings.api_key:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Not found.",
        )
    if x_api_key != settings.api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Please provide a valid API key.",
        )
