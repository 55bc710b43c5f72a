"""Pydantic models for the instances.mastodon.xyz list document.

The upstream document is loosely typed: keys come and go between instances and
many values are ``null``. Every model here ignores unknown keys and treats a
missing or ``null`` value as the field's zero value, so a sparse record still
decodes.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _Document(BaseModel):
    """Base for upstream models: unknown keys ignored, nulls become defaults."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class LangCulture(_Document):
    lang_culture_name: str = Field(default="", alias="langCultureName")
    display_name: str = Field(default="", alias="displayName")
    culture_code: str = Field(default="", alias="cultureCode")


class Language(_Document):
    iso639_1: str = ""
    iso639_2: str = ""
    iso639_2en: str = ""
    iso639_3: str = ""
    name: list[str] = Field(default_factory=list)
    native_name: list[str] = Field(default_factory=list, alias="nativeName")
    direction: str = ""
    family: str = ""
    countries: list[str] = Field(default_factory=list)
    lang_culture_ms: list[LangCulture] = Field(default_factory=list, alias="langCultureMs")


class Country(_Document):
    code_2: str = ""
    code_3: str = ""
    num_code: str = Field(default="", alias="numCode")
    name: str = ""
    languages: list[str] = Field(default_factory=list)
    lang_culture_ms: list[LangCulture] = Field(default_factory=list, alias="langCultureMs")


class ProhibitedContentEntry(_Document):
    code: str = ""
    name: str = ""


class ProhibitedContentCatalog(_Document):
    """Shared catalog of content categories and their display names."""

    nudity_nocw: str = ""
    nudity_all: str = ""
    pornography_nocw: str = ""
    pornography_all: str = ""
    sexism: str = ""
    racism: str = ""
    illegal_content_links: str = Field(default="", alias="illegalContentLinks")
    spam: str = ""
    advertising: str = ""
    hate_speeches: str = Field(default="", alias="hateSpeeches")
    harrassment: str = ""
    spoilers_nocw: str = ""
    array: list[ProhibitedContentEntry] = Field(default_factory=list)


class InstanceInfos(_Document):
    """Self-declared policy block of an instance."""

    opt_out: bool = Field(default=False, alias="optOut")
    short_description: str = Field(default="", alias="shortDescription")
    full_description: str = Field(default="", alias="fullDescription")
    theme: Any = None
    languages: list[str] = Field(default_factory=list)
    no_other_languages: bool = Field(default=False, alias="noOtherLanguages")
    prohibited_content: list[str] = Field(default_factory=list, alias="prohibitedContent")
    other_prohibited_content: list[Any] = Field(
        default_factory=list, alias="otherProhibitedContent"
    )
    federation: str = ""
    bots: str = ""
    brands: str = ""


class InstanceRecord(_Document):
    """One instance as observed by the upstream checker."""

    id: str = Field(default="", alias="_id")
    name: str = ""
    added_at: datetime | None = Field(default=None, alias="addedAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")
    checked_at: datetime | None = Field(default=None, alias="checkedAt")
    date: datetime | None = None

    upchecks: int = 0
    downchecks: int = 0
    up: bool = False
    dead: bool = False
    blacklisted: bool = False

    users: int = 0
    users_change_ratio: int = Field(default=0, alias="usersChangeRatio")
    statuses: int = 0
    connections: int = 0
    connected: int = 0
    uptime: float = 0.0
    uptime_str: str = ""

    https_rank: str = ""
    https_score: int = 0
    obs_rank: str = ""
    obs_score: int = 0
    version: str = ""
    version_score: int = 0
    score: float = 0.0

    ipv6: bool = False
    open_registrations: bool = Field(default=False, alias="openRegistrations")
    history_migrated: bool = Field(default=False, alias="historyMigrated")
    second: int = 0
    info: str = ""

    infos: InstanceInfos = Field(default_factory=InstanceInfos)


class InstanceSnapshot(_Document):
    """A full list document fetched in one collection cycle."""

    instances: list[InstanceRecord] = Field(default_factory=list)
    total_users: int = Field(default=0, alias="totalUsers")
    languages: list[Language] = Field(default_factory=list)
    countries: list[Country] = Field(default_factory=list)
    prohibited_content: ProhibitedContentCatalog = Field(
        default_factory=ProhibitedContentCatalog, alias="prohibitedContent"
    )

    @property
    def total_instances(self) -> int:
        return len(self.instances)

    @property
    def total_statuses(self) -> int:
        return sum(instance.statuses for instance in self.instances)

    def users_above(self, threshold: int) -> int:
        """Count instances with strictly more than ``threshold`` users."""
        return sum(1 for instance in self.instances if instance.users > threshold)
