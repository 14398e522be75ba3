"""
Security Service for the Z-88 API

Provides JWT authentication, story ownership checks and request size limits.
"""

import os
from typing import Any, Dict, List, Optional, Tuple

import jwt
from fastapi import HTTPException, Request, status

JWT_ALGORITHM = "HS256"
JWT_AUDIENCE = "authenticated"

# Allowed origins for CORS; extended by Z88_ALLOWED_ORIGINS
ALLOWED_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:3000",
    "http://127.0.0.1:5173",
    "http://127.0.0.1:3000",
]

# Request size limits (in characters)
MAX_SEARCH_QUERY_LENGTH = 200
MAX_TAG_LENGTH = 50
MAX_TEMPLATE_VARIABLE_LENGTH = 300


class AuthenticationError(Exception):
    """Raised when authentication fails."""
    pass


def get_allowed_origins() -> List[str]:
    origins = list(ALLOWED_ORIGINS)
    for origin in os.getenv("Z88_ALLOWED_ORIGINS", "").split(","):
        origin = origin.strip()
        if origin and origin not in origins:
            origins.append(origin)
    return origins


def decode_jwt(token: str) -> Dict[str, Any]:
    """
    Decode and validate a Supabase JWT token.

    Args:
        token: JWT token string

    Returns:
        Decoded token payload

    Raises:
        AuthenticationError: If token is invalid or expired
    """
    jwt_secret = os.getenv("SUPABASE_JWT_SECRET", "")
    if not jwt_secret:
        # Development mode: no secret configured, signature is not checked
        try:
            return jwt.decode(token, options={"verify_signature": False})
        except jwt.DecodeError as e:
            raise AuthenticationError(f"Invalid token format: {e}")

    try:
        return jwt.decode(
            token,
            jwt_secret,
            algorithms=[JWT_ALGORITHM],
            audience=JWT_AUDIENCE,
            options={
                "verify_exp": True,
                "verify_iat": True,
                "require": ["exp", "sub"],
            }
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise AuthenticationError(f"Invalid token: {e}")


def extract_user_id(payload: Dict[str, Any]) -> str:
    """
    Extract user ID from JWT payload.

    Raises:
        AuthenticationError: If user ID not found in payload
    """
    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("User ID not found in token")
    return user_id


def _request_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization")
    if auth_header:
        # Extract token from "Bearer <token>" format
        parts = auth_header.split()
        if len(parts) == 2 and parts[0].lower() == "bearer":
            return parts[1]
    # Query parameter fallback for clients that cannot set headers
    return request.query_params.get("token")


async def get_current_user(request: Request) -> Tuple[str, Dict[str, Any]]:
    """
    Get the current authenticated user from the request.

    Returns:
        Tuple of (user_id, token_payload)

    Raises:
        HTTPException: If authentication fails
    """
    token = _request_token(request)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing Authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = decode_jwt(token)
        return extract_user_id(payload), payload
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )


async def get_optional_user(request: Request) -> Optional[str]:
    """User id when a valid token is present, else None."""
    token = _request_token(request)
    if not token:
        return None
    try:
        return extract_user_id(decode_jwt(token))
    except AuthenticationError:
        return None


def check_story_ownership(story: Optional[Dict[str, Any]], user_id: str) -> Dict[str, Any]:
    """
    Ensure ``story`` exists and belongs to ``user_id``.

    Raises:
        HTTPException: 404 if missing, 403 if owned by someone else
    """
    if story is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Story not found",
        )
    owner = story.get("user_id")
    if owner and owner != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have permission to modify this story",
        )
    return story


def _too_large(field_name: str, limit: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        detail=f"{field_name} exceeds maximum length of {limit} characters",
    )


def validate_request_size(
    search_query: Optional[str] = None,
    tags: Optional[List[str]] = None,
    variables: Optional[Dict[str, str]] = None,
) -> None:
    """
    Validate free-form field sizes.

    Raises:
        HTTPException: 413 if any field exceeds size limits
    """
    if search_query and len(search_query) > MAX_SEARCH_QUERY_LENGTH:
        raise _too_large("query", MAX_SEARCH_QUERY_LENGTH)

    if any(len(tag) > MAX_TAG_LENGTH for tag in tags or []):
        raise _too_large("tag", MAX_TAG_LENGTH)

    for name, value in (variables or {}).items():
        if len(value) > MAX_TEMPLATE_VARIABLE_LENGTH:
            raise _too_large(name, MAX_TEMPLATE_VARIABLE_LENGTH)
