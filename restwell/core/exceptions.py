"""HTTP failure signals that render themselves into a response.

Code paths that detect a reportable failure (lookup miss, invalid input,
business-rule violation) raise one of these exceptions. A single listener
registered on the application catches them and calls ``prepare_response``
before the response is sent.
"""

from __future__ import annotations

from collections.abc import Iterable
from collections.abc import Mapping
from http import HTTPStatus
import logging
from typing import Any

from starlette.responses import Response

from restwell.schemas.error import ErrorResponse

logger = logging.getLogger(__name__)

JSON_MEDIA_TYPE = "application/json"


class RestwellError(Exception):
    """Marker base for every exception raised by restwell."""


class InvalidArgumentError(RestwellError, ValueError):
    """Raised when a failure signal is built with inconsistent arguments."""


def _reason_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "HTTP Error"


class HttpException(RestwellError):
    """Failure that must be translated into an HTTP response.

    Carries a human-readable ``message``, an optional structured ``errors``
    payload and optional extra response headers. The message defaults to the
    standard reason phrase of the status code.
    """

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(
        self,
        status_code: int | None = None,
        message: str | None = None,
        errors: Any = None,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self.status_code = int(status_code if status_code is not None else self.status_code)
        if not 400 <= self.status_code <= 599:
            raise InvalidArgumentError(f"{self.status_code} is not an HTTP error status code")
        self.message = ""
        self.errors = errors
        self.headers = dict(headers) if headers else {}
        self.set_message(message if message is not None else _reason_phrase(self.status_code))

    def set_message(self, message: str) -> None:
        """Set the human-readable message."""
        self.message = message
        self.args = (message,)

    def set_errors(self, errors: Any) -> None:
        """Attach a structured error payload (stored as given)."""
        self.errors = errors

    def get_errors(self) -> Any:
        """Return the structured error payload, or ``None`` when unset."""
        return self.errors

    def response_headers(self) -> dict[str, str]:
        """Headers written into the response on top of the content headers."""
        return dict(self.headers)

    def to_payload(self) -> ErrorResponse:
        return ErrorResponse(status_code=self.status_code, message=str(self.message), errors=self.errors)

    def render_body(self) -> bytes:
        payload = self.to_payload()
        if payload.errors is None:
            return payload.model_dump_json(exclude={"errors"}).encode("utf-8")

        try:
            return payload.model_dump_json().encode("utf-8")
        except (TypeError, ValueError):
            logger.warning(
                "Dropping non-serializable errors payload from %s response",
                self.status_code,
                exc_info=True,
            )
            return payload.model_dump_json(exclude={"errors"}).encode("utf-8")

    def prepare_response(self, response: Response) -> None:
        """Write status, headers and JSON body for this failure into ``response``."""
        body = self.render_body()

        response.status_code = self.status_code
        for name, value in self.response_headers().items():
            try:
                response.headers[name] = value
            except UnicodeEncodeError:
                logger.warning(
                    "Dropping %s header that is not latin-1 encodable from %s response",
                    name,
                    self.status_code,
                )
        response.headers["content-type"] = JSON_MEDIA_TYPE
        response.headers["content-length"] = str(len(body))
        response.body = body

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status_code={self.status_code}, message={self.message!r})"


class ClientErrorException(HttpException):
    """Failure caused by the client (4xx)."""

    status_code = HTTPStatus.BAD_REQUEST

    def __init__(
        self,
        status_code: int | None = None,
        message: str | None = None,
        errors: Any = None,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        if status_code is not None and not 400 <= int(status_code) <= 499:
            raise InvalidArgumentError(
                f"A client error status code must be in the 4xx range, {status_code} given"
            )
        super().__init__(status_code, message, errors, headers=headers)


class ServerErrorException(HttpException):
    """Failure on the server side (5xx)."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(
        self,
        status_code: int | None = None,
        message: str | None = None,
        errors: Any = None,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        if status_code is not None and not 500 <= int(status_code) <= 599:
            raise InvalidArgumentError(
                f"A server error status code must be in the 5xx range, {status_code} given"
            )
        super().__init__(status_code, message, errors, headers=headers)


class _FixedStatusMixin:
    """Constructor shared by variants whose status code is part of their type."""

    def __init__(
        self,
        message: str | None = None,
        errors: Any = None,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(None, message, errors, headers=headers)  # type: ignore[call-arg]


class BadRequestException(_FixedStatusMixin, ClientErrorException):
    status_code = HTTPStatus.BAD_REQUEST


class UnauthorizedException(_FixedStatusMixin, ClientErrorException):
    """401, optionally advertising an authentication challenge."""

    status_code = HTTPStatus.UNAUTHORIZED

    def __init__(
        self,
        message: str | None = None,
        errors: Any = None,
        *,
        challenge: str | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, errors, headers=headers)
        self.challenge = challenge

    def response_headers(self) -> dict[str, str]:
        headers = super().response_headers()
        if self.challenge:
            headers["WWW-Authenticate"] = self.challenge
        return headers


class ForbiddenException(_FixedStatusMixin, ClientErrorException):
    status_code = HTTPStatus.FORBIDDEN


class NotFoundException(_FixedStatusMixin, ClientErrorException):
    status_code = HTTPStatus.NOT_FOUND


class MethodNotAllowedException(_FixedStatusMixin, ClientErrorException):
    """405, listing the verbs the resource does accept in ``Allow``."""

    status_code = HTTPStatus.METHOD_NOT_ALLOWED

    def __init__(
        self,
        message: str | None = None,
        errors: Any = None,
        *,
        allowed_methods: Iterable[str] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, errors, headers=headers)
        self.allowed_methods = [method.upper() for method in allowed_methods] if allowed_methods else []

    def response_headers(self) -> dict[str, str]:
        headers = super().response_headers()
        if self.allowed_methods:
            headers["Allow"] = ", ".join(self.allowed_methods)
        return headers


class NotAcceptableException(_FixedStatusMixin, ClientErrorException):
    status_code = HTTPStatus.NOT_ACCEPTABLE


class ConflictException(_FixedStatusMixin, ClientErrorException):
    status_code = HTTPStatus.CONFLICT


class GoneException(_FixedStatusMixin, ClientErrorException):
    status_code = HTTPStatus.GONE


class UnsupportedMediaTypeException(_FixedStatusMixin, ClientErrorException):
    status_code = HTTPStatus.UNSUPPORTED_MEDIA_TYPE


class UnprocessableEntityException(_FixedStatusMixin, ClientErrorException):
    """422, carrying field-level validation errors."""

    status_code = HTTPStatus.UNPROCESSABLE_ENTITY


class _RetryAfterMixin:
    def __init__(
        self,
        message: str | None = None,
        errors: Any = None,
        *,
        retry_after: int | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, errors, headers=headers)  # type: ignore[call-arg]
        self.retry_after = retry_after

    def response_headers(self) -> dict[str, str]:
        headers = super().response_headers()  # type: ignore[misc]
        if self.retry_after is not None:
            headers["Retry-After"] = str(self.retry_after)
        return headers


class TooManyRequestsException(_RetryAfterMixin, _FixedStatusMixin, ClientErrorException):
    status_code = HTTPStatus.TOO_MANY_REQUESTS


class InternalServerErrorException(_FixedStatusMixin, ServerErrorException):
    status_code = HTTPStatus.INTERNAL_SERVER_ERROR


class NotImplementedException(_FixedStatusMixin, ServerErrorException):
    status_code = HTTPStatus.NOT_IMPLEMENTED


class ServiceUnavailableException(_RetryAfterMixin, _FixedStatusMixin, ServerErrorException):
    status_code = HTTPStatus.SERVICE_UNAVAILABLE


_EXCEPTIONS_BY_STATUS: dict[int, type[HttpException]] = {
    exc_class.status_code: exc_class
    for exc_class in (
        BadRequestException,
        UnauthorizedException,
        ForbiddenException,
        NotFoundException,
        MethodNotAllowedException,
        NotAcceptableException,
        ConflictException,
        GoneException,
        UnsupportedMediaTypeException,
        UnprocessableEntityException,
        TooManyRequestsException,
        InternalServerErrorException,
        NotImplementedException,
        ServiceUnavailableException,
    )
}


def exception_for_status(
    status_code: int,
    message: str | None = None,
    errors: Any = None,
    *,
    headers: Mapping[str, str] | None = None,
) -> HttpException:
    """Build the most specific failure signal for ``status_code``."""
    status_code = int(status_code)
    exc_class = _EXCEPTIONS_BY_STATUS.get(status_code)
    if exc_class is not None:
        return exc_class(message, errors, headers=headers)
    if 400 <= status_code <= 499:
        return ClientErrorException(status_code, message, errors, headers=headers)
    if 500 <= status_code <= 599:
        return ServerErrorException(status_code, message, errors, headers=headers)
    raise InvalidArgumentError(f"{status_code} is not an HTTP error status code")
