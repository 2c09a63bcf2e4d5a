from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    """수집기 전체 설정. .env 파일 또는 환경변수에서 로드."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API 연결
    api_base_url: str = "https://api.mentemori.icu"
    request_timeout: float = 30.0

    # 대상 서버 (world_id 첫 자리: 1=JP, 2=KR, 3=Asia, 4=NA, 5=EU, 6=Global)
    server_id: str = "1"

    # 병렬 실행
    concurrency: int = Field(default=3, ge=1)
    request_delay: float = Field(default=0.1, ge=0)

    # 재시도 (선형 backoff: retry_backoff * attempt 초)
    max_retries: int = Field(default=3, ge=1)
    retry_backoff: float = Field(default=1.0, ge=0)

    # 두 모드 사이 API 부하 완화용 대기
    mode_pause: float = Field(default=2.0, ge=0)

    # 파일 경로
    data_dir: Path = Path("data")

    # DEBUG 파일 로그 (<data_dir>/logs)
    log_to_file: bool = False

    @field_validator("server_id", mode="before")
    @classmethod
    def _single_digit_server(cls, v: str) -> str:
        v = str(v).strip()
        if len(v) != 1 or not v.isdigit():
            raise ValueError(f"server_id must be a single digit, got {v!r}")
        return v

    # ── 파생 경로 ──

    @property
    def local_snapshot_path(self) -> Path:
        return self.data_dir / "local.json"

    @property
    def global_snapshot_path(self) -> Path:
        return self.data_dir / "global.json"

    @property
    def log_dir(self) -> Path:
        return self.data_dir / "logs"
