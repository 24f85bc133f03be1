"""도메인 예외 계층.

입력 오류와 지오코딩 실패만 호출자에게 전달되고, 나머지 공급자 오류는 각 단계에서 강등 처리됩니다.
"""

from __future__ import annotations

from collections.abc import Sequence


class MeetpointError(Exception):
    """모든 도메인 예외의 기반 클래스."""

    status_code: int = 400
    error_code: str = "MEETPOINT_ERROR"

    def __init__(self, message: str, *, details: Sequence[str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = list(details or [])

    def to_payload(self) -> dict[str, object]:
        return {"detail": self.message, "error_code": self.error_code, "details": self.details}


class InvalidInputError(MeetpointError):
    """I/O 이전에 거부되는 입력 오류."""

    error_code = "INVALID_INPUT"


class EmptyAddressListError(InvalidInputError):
    error_code = "EMPTY_ADDRESSES"

    def __init__(self) -> None:
        super().__init__("At least one address is required")


class TooManyAddressesError(InvalidInputError):
    error_code = "TOO_MANY_ADDRESSES"

    def __init__(self, count: int, limit: int) -> None:
        super().__init__(
            f"Maximum {limit} addresses allowed per request",
            details=[f"received {count} addresses"],
        )
        self.count = count
        self.limit = limit


class InvalidSearchParameterError(InvalidInputError):
    error_code = "INVALID_SEARCH_PARAMETER"

    def __init__(self, field: str, value: object, minimum: int, maximum: int) -> None:
        super().__init__(
            f"{field} must be between {minimum} and {maximum}",
            details=[f"{field}={value}"],
        )
        self.field = field


class AddressNotFoundError(MeetpointError):
    """공급자가 주소에 대한 결과를 하나도 반환하지 않았을 때 발생합니다."""

    status_code = 404
    error_code = "ADDRESS_NOT_FOUND"

    def __init__(self, address: str, provider: str) -> None:
        super().__init__(f"Address not found: {address}", details=[f"provider={provider}"])
        self.address = address
        self.provider = provider


class ProviderUnavailableError(MeetpointError):
    """네트워크, 인증, 타임아웃, 자격 증명 누락 등으로 공급자를 사용할 수 없을 때 발생합니다."""

    status_code = 503
    error_code = "SERVICE_UNAVAILABLE"

    def __init__(self, provider: str, reason: str | None = None) -> None:
        super().__init__(
            f"External service '{provider}' is currently unavailable",
            details=[reason] if reason else None,
        )
        self.provider = provider
        self.reason = reason


class GeocodingExhaustedError(MeetpointError):
    """지오코딩 체인의 모든 공급자가 실패했을 때 발생합니다."""

    error_code = "GEOCODING_ALL_FAILED"

    def __init__(self, address: str, providers_tried: Sequence[str]) -> None:
        tried = list(providers_tried)
        super().__init__(
            f"Unable to geocode address: {address}",
            details=[f"providers tried: {', '.join(tried) or 'none configured'}"],
        )
        self.address = address
        self.providers_tried = tried
