"""Error kinds surfaced by the API.

Every kind is an HTTPException so route code can raise it the same way it
raises FastAPI's own; the handlers in main.py turn all of them into a
``{"success": false, "message": ...}`` body.
"""
from typing import Optional
from fastapi import HTTPException


class ApiError(HTTPException):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        headers = {"WWW-Authenticate": "Bearer"} if self.status_code == 401 else None
        super().__init__(status_code=self.status_code, detail=message or self.message, headers=headers)


class Unauthenticated(ApiError):
    status_code = 401
    message = "No authentication token, access denied"


class MalformedCredential(ApiError):
    status_code = 401
    message = "Invalid token format. Use Bearer token"


class CredentialExpired(ApiError):
    status_code = 401
    message = "Token has expired"


class InvalidCredential(ApiError):
    status_code = 401
    message = "Token is not valid"


class PrincipalNotFound(ApiError):
    status_code = 401
    message = "User not found"


class Forbidden(ApiError):
    status_code = 403
    message = "Access denied"


class NotFound(ApiError):
    status_code = 404
    message = "Not found"


class ValidationError(ApiError):
    status_code = 400
    message = "Invalid request"


class InternalError(ApiError):
    pass
