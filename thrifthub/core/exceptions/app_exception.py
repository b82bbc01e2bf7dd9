from fastapi import HTTPException
from typing import Optional, Any


class AppHttpException(HTTPException):
    code = "INTERNAL_SERVER_ERROR"

    def __init__(
        self,
        status_code: int,
        detail: str,
        code: Optional[str] = None,
        errors: Optional[Any] = None,
    ):
        super().__init__(status_code=status_code, detail=detail)
        self.status_code = status_code
        self.detail = detail
        self.code = code or self.code
        self.errors = errors

    @property
    def content(self) -> dict:
        error = {"code": self.code, "message": self.detail}
        if self.errors:
            error["details"] = self.errors
        return {"success": False, "error": error}


class ValidationException(AppHttpException):
    code = "VALIDATION_ERROR"

    def __init__(self, detail: str = "Validation failed", errors: Optional[Any] = None):
        super().__init__(status_code=400, detail=detail, errors=errors)


class AuthenticationException(AppHttpException):
    code = "UNAUTHORIZED"

    def __init__(self, detail: str = "Authentication required"):
        super().__init__(status_code=401, detail=detail)


class ForbiddenException(AppHttpException):
    code = "FORBIDDEN"

    def __init__(self, detail: str = "Access denied"):
        super().__init__(status_code=403, detail=detail)


class NotFoundException(AppHttpException):
    code = "NOT_FOUND"

    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=404, detail=detail)


class ConflictException(AppHttpException):
    code = "CONFLICT"

    def __init__(self, detail: str):
        super().__init__(status_code=409, detail=detail)


class GatewayException(AppHttpException):
    """An upstream service (payment gateway, embedding API) failed."""
    code = "GATEWAY_ERROR"

    def __init__(self, detail: str = "Upstream service unavailable"):
        super().__init__(status_code=502, detail=detail)


def field_error(field: str, message: str) -> ValidationException:
    return ValidationException(detail=message, errors=[{"field": field, "message": message}])
