"""Application settings loaded from environment variables."""

import os
from pathlib import Path

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from scorecard.scoring.engine import ScoringConfig

BASE_DIR = Path(__file__).resolve().parents[1]
DEFAULT_LOCAL_DATA_DIR = BASE_DIR / "data"
DEFAULT_VERCEL_DATA_DIR = Path("/tmp/scorecard")


TRUTHY_VALUES = {"1", "true", "yes", "on"}


def _is_truthy(value: str | None) -> bool:
    return bool(value and value.strip().lower() in TRUTHY_VALUES)


def _running_on_vercel() -> bool:
    return bool(os.getenv("VERCEL") or os.getenv("VERCEL_ENV") or _is_truthy(os.getenv("SCORECARD_VERCEL_ENVIRONMENT")))


def _default_data_dir() -> str:
    if _running_on_vercel():
        return str(DEFAULT_VERCEL_DATA_DIR)
    return str(DEFAULT_LOCAL_DATA_DIR)


class Settings(BaseSettings):
    """Runtime configuration for the Scorecard backend."""

    model_config = SettingsConfigDict(env_prefix="SCORECARD_", extra="ignore")

    app_name: str = "Scorecard API"
    log_level: str = "INFO"
    data_dir: str = Field(
        default_factory=_default_data_dir,
        validation_alias=AliasChoices("SCORECARD_DATA_DIR", "DATA_DIR"),
    )
    sqlite_path: str | None = Field(
        default=None,
        validation_alias=AliasChoices("SCORECARD_SQLITE_PATH", "SQLITE_PATH"),
    )

    # CORS configuration
    cors_allow_origins: str = Field(
        default="*",
        validation_alias=AliasChoices("SCORECARD_CORS_ALLOW_ORIGINS", "CORS_ALLOW_ORIGINS"),
    )

    # Grading model calls
    answer_model: str = "gpt-4o"
    transcript_model: str = "gpt-4o-mini"
    summary_model: str = "gpt-4o"
    openai_timeout_seconds: float = 30.0
    openai_retry_backoff_seconds: float = 0.5
    grading_max_workers: int = 4

    # Scoring constants
    marks_high: int = 15
    marks_medium: int = 10
    marks_low: int = 5
    default_marks: int = 10
    technical_criterion: str = "Technical Skills"
    technical_cutoff: int = 50
    hire_threshold: int = 70
    maybe_threshold: int = 50
    strongly_recommend_threshold: int = 80
    recommend_threshold: int = 60
    on_hold_threshold: int = 40

    @model_validator(mode="after")
    def _set_sqlite_path(self) -> "Settings":
        if not self.sqlite_path:
            self.sqlite_path = str(Path(self.data_dir) / "scorecard.db")
        return self

    @property
    def sqlite_url(self) -> str:
        return f"sqlite:///{self.sqlite_path}"

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir)

    @property
    def cors_origin_list(self) -> list[str]:
        if self.cors_allow_origins.strip() == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_allow_origins.split(",") if origin.strip()]

    def scoring_config(self) -> ScoringConfig:
        return ScoringConfig(
            difficulty_marks={"High": self.marks_high, "Medium": self.marks_medium, "Low": self.marks_low},
            default_marks=self.default_marks,
            technical_criterion=self.technical_criterion,
            technical_cutoff=self.technical_cutoff,
            hire_threshold=self.hire_threshold,
            maybe_threshold=self.maybe_threshold,
            strongly_recommend_threshold=self.strongly_recommend_threshold,
            recommend_threshold=self.recommend_threshold,
            on_hold_threshold=self.on_hold_threshold,
        )


settings = Settings()
