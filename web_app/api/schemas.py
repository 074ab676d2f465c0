"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, Field
from typing import Any, List, Optional


class CreateLinkRequest(BaseModel):
    """Request to create a link.

    Both fields are optional at the schema level so a missing target URL is
    reported by the service as a validation error in the standard envelope.
    """

    targetUrl: Optional[str] = Field(None, description="The URL to redirect to", max_length=2048)
    customCode: Optional[str] = Field(None, description="Optional custom short code")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "targetUrl": "https://example.com/very/long/path/to/resource",
                    "customCode": None
                },
                {
                    "targetUrl": "https://github.com/user/repo",
                    "customCode": "myrepo"
                }
            ]
        }
    }


class ApiResponse(BaseModel):
    """Envelope wrapping every API response."""

    statusCode: int = Field(..., description="HTTP status code")
    success: bool = Field(..., description="False for error responses")
    message: str = Field(..., description="Human readable outcome")
    data: Any = Field(None, description="Payload, null on errors")
    errors: List[Any] = Field(default_factory=list, description="Error details")

    @classmethod
    def ok(cls, data: Any, message: str, status_code: int = 200) -> "ApiResponse":
        return cls(statusCode=status_code, success=True, message=message, data=data)

    @classmethod
    def fail(cls, message: str, status_code: int, errors: Optional[List[Any]] = None) -> "ApiResponse":
        return cls(
            statusCode=status_code,
            success=False,
            message=message,
            data=None,
            errors=errors or [],
        )
