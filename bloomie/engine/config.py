"""Configuration dataclasses for the Bloomie engine.

Policy thresholds live here instead of as literals in the rules so they can be
tuned per deployment and overridden in tests.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class LLMConfig:
    """Chat-completion endpoint used for the primary alert path."""
    url: str = "https://api.openai.com/v1/chat/completions"
    model: str = "gpt-4o-mini"
    api_key: str = ""
    timeout: int = 30
    temperature: float = 0.3
    max_tokens: int = 1000

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    @classmethod
    def from_env(cls):
        return cls(
            url=os.environ.get("BLOOMIE_LLM_URL", cls.url),
            model=os.environ.get("BLOOMIE_LLM_MODEL", cls.model),
            api_key=os.environ.get("OPENAI_API_KEY", ""),
            timeout=int(os.environ.get("BLOOMIE_LLM_TIMEOUT", cls.timeout)),
        )


@dataclass
class DetectorConfig:
    """Thresholds for interval, trend, and fallback rules."""
    min_logs: int = 3
    window_days: int = 30

    # Trend windows
    trend_window: int = 7
    score_delta: float = 0.3
    mood_window: int = 5
    mood_negative_limit: int = 2
    negative_moods: frozenset = frozenset({"sad", "tired"})
    min_frequency_points: int = 4
    frequency_increase_ratio: float = 1.2
    frequency_decrease_ratio: float = 0.8

    # Fallback rules
    declining_score_ceiling: float = 3.5
    urgent_score_ceiling: float = 2.5
    overdue_ratio: float = 1.3
    watering_urgent_ratio: float = 2.0
    feeding_urgent_ratio: float = 1.8
    predictive_ratio: float = 0.7
    predictive_horizon_days: int = 2
    walk_overdue_ratio: float = 1.5
    walk_warning_ratio: float = 2.0
    walk_max_interval_days: float = 2.0
    symptom_scan_logs: int = 5

    # LLM context
    max_context_logs: int = 20

    # Prioritization
    max_alerts: int = 3
    max_warnings: int = 2
    max_info_with_warnings: int = 1
    max_info_only: int = 2


@dataclass
class TaskConfig:
    """Upcoming-task prediction horizons."""
    max_tasks: int = 3
    watering_horizon_hours: float = 24.0
    unwatered_due_hours: float = 2.0
    pet_feeding_lead_hours: float = 2.0
    baby_feeding_lead_hours: float = 0.5
    walk_due_hours: float = 6.0
    walk_urgent_hours: float = 12.0
    walk_reminder_hours: float = 1.0


@dataclass
class AckConfig:
    """Acknowledgement suppression settings."""
    validity_days: int = 7
    history_limit: int = 100


@dataclass
class SearchConfig:
    """Perplexity web-search settings and response-cache policy."""
    url: str = "https://api.perplexity.ai/chat/completions"
    model: str = "sonar"
    api_key: str = ""
    timeout: int = 30
    cache_expiry_hours: int = 24 * 7
    max_cache_entries: int = 50

    @classmethod
    def from_env(cls):
        return cls(api_key=os.environ.get("PERPLEXITY_API_KEY", ""))


@dataclass
class PathConfig:
    """Local data directory for the SQLite stores."""
    data_dir: Path = field(default_factory=lambda: Path.home() / ".bloomie")

    @property
    def cache_db_path(self) -> Path:
        return self.data_dir / "bloomie.db"

    @classmethod
    def from_env(cls):
        data_dir = os.environ.get("BLOOMIE_DATA_DIR")
        if data_dir:
            return cls(data_dir=Path(data_dir))
        return cls()


@dataclass
class AppConfig:
    """Top-level config composing all sub-configs."""
    llm: LLMConfig = field(default_factory=LLMConfig)
    detector: DetectorConfig = field(default_factory=DetectorConfig)
    tasks: TaskConfig = field(default_factory=TaskConfig)
    ack: AckConfig = field(default_factory=AckConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    paths: PathConfig = field(default_factory=PathConfig)

    @classmethod
    def from_env(cls):
        """Create config from environment variables."""
        return cls(
            llm=LLMConfig.from_env(),
            detector=DetectorConfig(),
            tasks=TaskConfig(),
            ack=AckConfig(),
            search=SearchConfig.from_env(),
            paths=PathConfig.from_env(),
        )
