# modelchat/utils/errors.py
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import HTTPException


class ErrorCode:
    # Request related errors
    VALIDATION_001 = "VALIDATION_001"  # Request failed schema validation

    # Chat related errors
    CHAT_001 = "CHAT_001"  # Chat not found

    # Rate limiting
    RATE_001 = "RATE_001"  # Too many message submissions

    # Server side errors
    INTERNAL_001 = "INTERNAL_001"  # Storage or unexpected failure


class APIError(HTTPException):
    def __init__(
            self,
            code: str,
            message: str,
            status_code: int = 400,
            details: Optional[Dict[str, Any]] = None,
            headers: Optional[Dict[str, str]] = None
    ):
        self.error_code = code
        self.error_message = message
        self.error_details = details
        super().__init__(status_code=status_code, detail=message, headers=headers)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": {
                "code": self.error_code,
                "message": self.error_message,
                "details": self.error_details
            },
            "success": False,
            "timestamp": datetime.utcnow().isoformat()
        }


class ValidationError(APIError):
    def __init__(self, message: str = "Invalid request", details: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.VALIDATION_001, message, 400, details)


class NotFoundError(APIError):
    def __init__(self, message: str = "Chat not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.CHAT_001, message, 404, details)


class RateLimited(APIError):
    def __init__(self, message: str = "Too many requests", headers: Optional[Dict[str, str]] = None):
        super().__init__(ErrorCode.RATE_001, message, 429, None, headers)


class InternalError(APIError):
    def __init__(self, message: str = "An unexpected error occurred"):
        super().__init__(ErrorCode.INTERNAL_001, message, 500)
