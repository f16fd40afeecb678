# 도메인 예외: 라우터에서 status_code 그대로 HTTPException 으로 변환


class ProximityError(Exception):
    """모든 도메인 오류의 기반 클래스. status_code 는 HTTP 응답 코드."""

    status_code: int = 400
    reason: str = "error"

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidArgument(ProximityError):
    """잘못된 좌표/범위/필수값 누락. 호출자가 고칠 수 있는 오류."""

    status_code = 400
    reason = "invalid_argument"


class NotFound(ProximityError):
    """모먼트/매치 없음 또는 만료."""

    status_code = 404
    reason = "not_found"


class Forbidden(ProximityError):
    """권한 없음 (소유자 아님, 참여자 아님)."""

    status_code = 403
    reason = "forbidden"


class Conflict(ProximityError):
    """같은 (requester, moment) 매치가 이미 존재."""

    status_code = 409
    reason = "conflict"


class InvalidOperation(ProximityError):
    """자기 모먼트 참여, 종료된 매치 재전이, pending 으로 되돌리기."""

    status_code = 409
    reason = "invalid_operation"


class LockTimeout(TimeoutError):
    """키 단위 락을 제한 시간 안에 얻지 못함 (내부 오류로 취급)."""
