from abc import ABCMeta, abstractmethod
from typing import Any, Optional, Union
from fastapi import HTTPException
from fastapi.responses import JSONResponse, Response

from core.exceptions import RedemptionError, RedemptionFailureReason


class HttpResponseAbstract(metaclass=ABCMeta):
    @abstractmethod
    def response(self) -> Union[JSONResponse, Response, None]:
        pass


class Ok(HttpResponseAbstract):
    status_code = 200

    def __init__(self, data: Optional[Any]) -> None:
        self.data = data if data is not None else ""

    def response(self) -> JSONResponse:
        return JSONResponse(content=self.data, status_code=self.status_code)


class Created(Ok):
    status_code = 201


class NoContent(HttpResponseAbstract):
    def response(self) -> Response:
        return Response(status_code=204)


class MessageResponse(HttpResponseAbstract):
    """Error response with a ``{"message": ...}`` body.

    custom_response replaces the whole body, e.g.
    BadRequest(custom_response={"hello": "world"}) -> 400 {"hello": "world"}
    """

    status_code = 400
    default_message = "Bad Request"

    def __init__(
        self, message: Optional[str] = None, custom_response: Optional[Any] = None
    ) -> None:
        self.message = message or self.default_message
        self.custom_response = custom_response

    def response(self) -> JSONResponse:
        if self.custom_response is None:
            return JSONResponse(
                content={"message": self.message}, status_code=self.status_code
            )
        return JSONResponse(content=self.custom_response, status_code=self.status_code)


class BadRequest(MessageResponse):
    status_code = 400


class Unauthorized(MessageResponse):
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(MessageResponse):
    status_code = 403
    default_message = "You don't have permissions to perform this action"


class NotFound(MessageResponse):
    status_code = 404
    default_message = "Not Found"


class Conflict(MessageResponse):
    status_code = 409
    default_message = "Conflict"


class UnprocessableEntity(MessageResponse):
    status_code = 422
    default_message = "Invalid request data"


class InternalServerError(HttpResponseAbstract):
    def __init__(
        self, error: Optional[str] = None, custom_response: Optional[Any] = None
    ) -> None:
        self.error = error
        self.custom_response = custom_response

    def response(self) -> JSONResponse:
        if self.custom_response is None:
            raise HTTPException(status_code=500, detail="Something wrong with server")
        raise HTTPException(status_code=500, detail=self.custom_response)


def common_response(res: HttpResponseAbstract):
    return res.response()


def redemption_failure(error: RedemptionError) -> HttpResponseAbstract:
    """Map a redemption failure to its HTTP response.

    NOT_FOUND is a 404, every other reason is a 400. The body always carries
    the stable reason code.
    """
    body = {
        "success": False,
        "reason": error.reason.value,
        "message": error.message,
    }
    if error.reason == RedemptionFailureReason.NOT_FOUND:
        return NotFound(custom_response=body)
    return BadRequest(custom_response=body)


def handle_http_exception(
    e: HTTPException,
) -> Union[None, JSONResponse, Response]:
    if e.status_code == 400:
        return common_response(BadRequest(message=e.detail))
    elif e.status_code == 401:
        return common_response(Unauthorized(message=e.detail))
    elif e.status_code == 403:
        return common_response(Forbidden(message=e.detail))
    elif e.status_code == 404:
        return common_response(NotFound(message=e.detail))
    elif e.status_code == 409:
        return common_response(Conflict(message=e.detail))
    elif e.status_code == 422:
        return common_response(UnprocessableEntity(message=e.detail))
    elif e.status_code >= 500:
        return common_response(InternalServerError(error=e.detail))
    else:
        return common_response(
            InternalServerError(error=f"Unexpected error: {e.detail}")
        )
