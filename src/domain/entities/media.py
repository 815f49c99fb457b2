"""Per-user media record entities.

Immutable value objects for the records a viewer accumulates while watching:
playback progress, favorites and intro/outro skip intervals. Field names are
the snake_case shape exchanged with the web application.
"""

from typing import Any, Literal, Self

import attrs
from attrs import define, field, validators

SKIP_KEY_SEPARATOR = "+"

FavoriteOrigin = Literal["vod", "live"]


def make_skip_key(source: str, id_: str) -> str:
    """Build the storage key for a skip config from its source and video id.

    Implementations sharing one database must agree on this exact format.

    Example:
        >>> make_skip_key("source1", "id1")
        'source1+id1'
    """
    return f"{source}{SKIP_KEY_SEPARATOR}{id_}"


def _known_fields(cls: type, data: dict[str, Any]) -> dict[str, Any]:
    names = {a.name for a in attrs.fields(cls)}
    return {k: v for k, v in data.items() if k in names}


@define(frozen=True, slots=True)
class PlayRecord:
    """Playback progress for one title from one source.

    `index` is the 1-based episode number; `play_time` and `total_time` are
    seconds; `save_time` is a millisecond epoch timestamp.
    """

    title: str = field(validator=validators.instance_of(str))
    source_name: str = field(validator=validators.instance_of(str))
    cover: str
    year: str
    index: int
    total_episodes: int
    play_time: int
    total_time: int
    save_time: int
    search_title: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Build a record from the application's JSON shape, ignoring unknown keys."""
        return cls(**_known_fields(cls, data))

    def to_dict(self) -> dict[str, Any]:
        return attrs.asdict(self)


@define(frozen=True, slots=True)
class Favorite:
    """A title the user starred, either on-demand or a live channel."""

    source_name: str = field(validator=validators.instance_of(str))
    total_episodes: int
    title: str = field(validator=validators.instance_of(str))
    year: str
    cover: str
    save_time: int
    search_title: str = ""
    origin: FavoriteOrigin | None = field(
        default=None,
        validator=validators.optional(validators.in_(["vod", "live"])),
    )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Build a favorite from the application's JSON shape, ignoring unknown keys."""
        return cls(**_known_fields(cls, data))

    def to_dict(self) -> dict[str, Any]:
        return attrs.asdict(self)


@define(frozen=True, slots=True)
class SkipConfig:
    """Intro/outro skip offsets (seconds) for one video."""

    enable: bool = field(validator=validators.instance_of(bool))
    intro_time: float = 0
    outro_time: float = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(**_known_fields(cls, data))

    def to_dict(self) -> dict[str, Any]:
        return attrs.asdict(self)
