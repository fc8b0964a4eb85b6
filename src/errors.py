"""게임 서비스 전역 예외 정의.

모든 예외는 GameServiceError를 상속하며, 감지된 지점에서 로깅된 후
상위로 그대로 전파됩니다. HTTP 계층에서만 응답 코드로 변환합니다.
"""


class GameServiceError(Exception):
    """게임 서비스 예외의 베이스 클래스."""


class ConfigurationError(GameServiceError):
    """필수 설정값(피드 URL 등)이 누락된 경우."""


class HttpError(GameServiceError):
    """피드 요청이 실패한 경우 (비정상 상태 코드 또는 전송 오류)."""

    def __init__(self, url: str, status_code: int | None = None, reason: str | None = None) -> None:
        self.url = url
        self.status_code = status_code
        if status_code is not None:
            message = f"HTTP error! Status: {status_code} ({url})"
        else:
            message = f"HTTP request failed: {reason or 'unknown error'} ({url})"
        super().__init__(message)


class MalformedResponseError(GameServiceError):
    """피드 응답 본문이 예상한 구조(배열의 배열)가 아닌 경우."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Unexpected JSON structure: {reason} ({url})")


class PersistenceError(GameServiceError):
    """데이터베이스 조회/적재가 실패한 경우."""


class PopulationError(GameServiceError):
    """게임 목록 적재(population run) 전체가 실패한 경우."""


class GameNotFoundError(GameServiceError):
    """요청한 ID의 게임이 존재하지 않는 경우."""

    def __init__(self, game_id: int) -> None:
        self.game_id = game_id
        super().__init__(f"Game {game_id} not found")
