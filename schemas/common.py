from typing import List
from pydantic import BaseModel, ConfigDict


NoContentResponse = None


class OkResponse(BaseModel):
    message: str = "Ok"


class UnauthorizedResponse(BaseModel):
    message: str = "Unauthorized"


class BadRequestResponse(BaseModel):
    message: str


class ConflictResponse(BaseModel):
    message: str


class ValidationErrorResponseDetail(BaseModel):
    field: str
    message: str


class ValidationErrorResponse(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "success": False,
                "reason": "VALIDATION_FAILED",
                "message": "Invalid request data",
                "errors": [
                    {
                        "field": "user_data.email",
                        "message": "Value error, Invalid email address.",
                    },
                ],
            }
        },
    )

    success: bool = False
    reason: str = "VALIDATION_FAILED"
    message: str
    errors: List[ValidationErrorResponseDetail]


class NotFoundResponse(BaseModel):
    message: str = "Not Found"


class InternalServerErrorResponse(BaseModel):
    detail: str
