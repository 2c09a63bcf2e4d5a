"""gvg-watch 예외 계층.

계층 구조:
    GvgWatchError
    ├── FetchError          (API 호출이 재시도 후에도 실패)
    │   └── IndexFetchError (worlds / wgroups 인덱스 조회 실패, 치명적)
    ├── StorageError        (스냅샷 파일 저장 실패)
    └── StepFailedError     (Orchestrator: 특정 모드 수집 실패)
"""


class GvgWatchError(Exception):
    """gvg-watch의 모든 예외의 기반 클래스."""


class FetchError(GvgWatchError):
    """API 호출 실패. 재시도를 모두 소진한 뒤에 발생한다."""

    step = "fetch"


class IndexFetchError(FetchError):
    """대상 목록(인덱스) 조회 실패. 해당 모드 전체를 중단시킨다."""

    step = "index"


class StorageError(GvgWatchError):
    """스냅샷 JSON 파일 쓰기 실패."""

    step = "storage"


class StepFailedError(GvgWatchError):
    """특정 수집 모드 실패. Orchestrator가 발생시킨다."""

    def __init__(self, step: str, cause: Exception):
        self.step = step
        self.cause = cause
        super().__init__(f"Collection failed at '{step}': {cause}")
