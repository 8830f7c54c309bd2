from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Mapping

from pydantic import TypeAdapter, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from retakes.core.errors import QueueConfigError

DEFAULT_PRIORITY_TAGS = ("@css/vip",)

_FLAG = TypeAdapter(bool)


def _flag(data: Mapping[str, Any], key: str, default: bool = True) -> bool:
    # accepts "false", "0", "off" and friends the same way the env loader does
    try:
        return _FLAG.validate_python(data.get(key, default))
    except ValidationError as exc:
        raise QueueConfigError(f"{key} must be a boolean, got {data.get(key)!r}") from exc


def parse_priority_tags(raw: str | None) -> tuple[str, ...]:
    if raw is None:
        return DEFAULT_PRIORITY_TAGS
    return tuple(tag.strip() for tag in raw.split(",") if tag.strip())


@dataclass(slots=True, frozen=True)
class QueueConfig:
    max_active_players: int = 9
    terrorist_ratio: float = 0.45
    priority_tags: tuple[str, ...] = field(default=DEFAULT_PRIORITY_TAGS)
    force_even_teams_on_multiple_of_ten: bool = True
    prevent_mid_round_team_changes: bool = True

    def validate(self) -> None:
        if self.max_active_players <= 0:
            raise QueueConfigError(f"max_active_players must be positive, got {self.max_active_players}")
        if not 0.0 < self.terrorist_ratio < 1.0:
            raise QueueConfigError(f"terrorist_ratio must be in (0, 1), got {self.terrorist_ratio}")

    @staticmethod
    def from_mapping(data: Mapping[str, Any]) -> QueueConfig:
        """Build a validated config from loose key/value input.

        Missing keys fall back to the defaults; ``priority_tags`` accepts either
        a comma-separated string or a list of tags.
        """
        tags = data.get("priority_tags")
        if isinstance(tags, str) or tags is None:
            parsed_tags = parse_priority_tags(tags)
        else:
            parsed_tags = tuple(str(t).strip() for t in tags if str(t).strip())
        config = QueueConfig(
            max_active_players=int(data.get("max_active_players", 9)),
            terrorist_ratio=float(data.get("terrorist_ratio", 0.45)),
            priority_tags=parsed_tags,
            force_even_teams_on_multiple_of_ten=_flag(data, "force_even_teams_on_multiple_of_ten"),
            prevent_mid_round_team_changes=_flag(data, "prevent_mid_round_team_changes"),
        )
        config.validate()
        return config


class QueueSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="RETAKES_", env_file=".env", extra="ignore")

    max_active_players: int = 9
    terrorist_ratio: float = 0.45
    priority_tags: str = ",".join(DEFAULT_PRIORITY_TAGS)
    force_even_teams_on_multiple_of_ten: bool = True
    prevent_mid_round_team_changes: bool = True

    def to_config(self) -> QueueConfig:
        return QueueConfig.from_mapping(self.model_dump())


@lru_cache()
def get_settings() -> QueueSettings:
    return QueueSettings()
