"""애플리케이션 환경 설정 모듈.

Application configuration module using pydantic-settings.
All settings can be overridden via environment variables or a .env file.
"""

from pathlib import Path
from typing import Any, List

from pydantic_settings import BaseSettings
from sqlalchemy.engine import URL

# .env 파일 절대 경로 — CWD와 무관하게 항상 프로젝트 루트의 .env를 참조
# Absolute path to .env file — ensures correct loading regardless of CWD
_ENV_FILE: Path = Path(__file__).resolve().parent.parent / ".env"


class Settings(BaseSettings):
    """애플리케이션 전역 설정 — 환경 변수 기반 구성.

    Global application settings loaded from environment variables.
    Database connection parameters are kept as separate fields and
    assembled into an asyncpg connection URL on demand.

    Attributes:
        DB_SERVER: PostgreSQL 호스트 (Database host)
        DB_PORT: PostgreSQL 포트 (Database port)
        DB_DATABASE: 데이터베이스 이름, 필수 (Database name, required at startup)
        DB_USER_ID: 접속 사용자 (Login user)
        DB_PASSWORD: 접속 비밀번호 (Login password, optional)
        DB_APPLICATION_NAME: pg_stat_activity에 표시될 이름 (Reported application name)
        DB_MINIMUM_POOL_SIZE: 커넥션 풀 크기 (Persistent connection pool size)
        DB_SSL_REQUIRED: TLS 강제 여부 (Require TLS for connections)
        DB_INCLUDE_ERROR_DETAIL: 오류 상세 노출 여부 (Expose store error detail in messages)
        DB_ENSURE_DATABASE_EXISTS: 시작 시 DB 생성 여부 (Create the database at startup if missing)
        DB_TABLE_NAMES: 레코드 → 테이블 이름 재정의 (Record class name -> table name overrides)
        APP_NAME: 애플리케이션 표시 이름 (Application display name)
        DEBUG: 디버그 모드 플래그 (Debug mode flag, enables SQL echo)
        LOG_LEVEL: 로그 레벨 (Root log level)
    """

    # 데이터베이스 — PostgreSQL 연결 파라미터 (asyncpg 드라이버 사용)
    DB_SERVER: str = "localhost"
    DB_PORT: int = 5432
    DB_DATABASE: str = ""  # 비어 있으면 시작 실패 (Blank name fails startup)
    DB_USER_ID: str = "postgres"
    DB_PASSWORD: str = ""
    DB_APPLICATION_NAME: str = ""
    DB_MINIMUM_POOL_SIZE: int = 5
    DB_SSL_REQUIRED: bool = False
    DB_INCLUDE_ERROR_DETAIL: bool = False
    DB_ENSURE_DATABASE_EXISTS: bool = False
    DB_TABLE_NAMES: dict[str, str] = {}

    # CORS 설정 — 프론트엔드 개발 서버 허용 (Vite dev server origins)
    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:3000"]

    # 앱 메타데이터 — Application metadata
    APP_NAME: str = "Securities Demo API"
    DEBUG: bool = False  # True이면 SQLAlchemy SQL 로그 출력 (Enables SQL echo when True)
    LOG_LEVEL: str = "INFO"

    # Axiom 로깅 설정 — Axiom observability platform settings
    AXIOM_API_TOKEN: str = ""  # Axiom API 토큰 (API token from Axiom dashboard)
    AXIOM_DATASET: str = ""  # Axiom 데이터셋 이름 (Dataset name for API logs)

    model_config = {"env_file": _ENV_FILE, "env_file_encoding": "utf-8"}

    def database_url(self, database: str | None = None) -> URL:
        """asyncpg 연결 URL을 생성합니다.

        Build the SQLAlchemy asyncpg connection URL.

        Args:
            database: 대상 DB 이름 재정의 (Override for the target database name)

        Returns:
            URL: SQLAlchemy 연결 URL (SQLAlchemy connection URL)

        Raises:
            ValueError: 데이터베이스 이름이 비어 있을 때 (When no database name is configured)
        """
        name: str = database if database is not None else self.DB_DATABASE
        if not name or not name.strip():
            raise ValueError("Database is required")

        return URL.create(
            "postgresql+asyncpg",
            username=self.DB_USER_ID,
            password=self.DB_PASSWORD or None,
            host=self.DB_SERVER,
            port=self.DB_PORT,
            database=name,
        )

    def engine_options(self) -> dict[str, Any]:
        """create_async_engine()에 전달할 옵션을 구성합니다.

        Keyword arguments for ``create_async_engine``: pool size, TLS mode
        and the reported application name.
        """
        options: dict[str, Any] = {"echo": self.DEBUG, "pool_pre_ping": True}
        if self.DB_MINIMUM_POOL_SIZE > 0:
            options["pool_size"] = self.DB_MINIMUM_POOL_SIZE

        connect_args: dict[str, Any] = {}
        if self.DB_SSL_REQUIRED:
            connect_args["ssl"] = "require"
        if self.DB_APPLICATION_NAME.strip():
            connect_args["server_settings"] = {"application_name": self.DB_APPLICATION_NAME}
        if connect_args:
            options["connect_args"] = connect_args

        return options


# 전역 설정 싱글턴 인스턴스 — Global settings singleton instance
settings: Settings = Settings()
