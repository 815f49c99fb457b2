"""User account and search history entities."""

from datetime import datetime

from attrs import define, field, validators


@define(frozen=True, slots=True)
class User:
    """Registered or auto-provisioned user.

    `password` is an already-hashed value; this layer never hashes. An empty
    string marks a user that was provisioned implicitly by a record write.
    """

    username: str = field(validator=[validators.instance_of(str), validators.min_len(1)])
    password: str = ""
    id: int | None = None


@define(frozen=True, slots=True)
class SearchHistoryEntry:
    """One remembered search keyword and when it was last used."""

    username: str
    keyword: str
    updated_at: datetime | None = None
    id: int | None = None
