"""Shared fixtures for instances collector tests."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

import pytest

from instances_collector.settings import Settings


def make_instance(**overrides: Any) -> dict[str, Any]:
    """Build one upstream instance record, shaped like the live list."""
    record: dict[str, Any] = {
        "_id": "58f3c0e8d2bc4e5e7b6f0a01",
        "name": "mastodon.example",
        "addedAt": "2017-04-16T19:45:12.000Z",
        "downchecks": 3,
        "upchecks": 2000,
        "https_rank": "A+",
        "https_score": 100,
        "obs_rank": "B",
        "obs_score": 65,
        "ipv6": True,
        "up": True,
        "users": 120,
        "usersChangeRatio": 0,
        "statuses": 4500,
        "connections": 900,
        "openRegistrations": True,
        "uptime": 0.998,
        "infos": {
            "optOut": False,
            "shortDescription": "A small instance",
            "fullDescription": "",
            "theme": None,
            "languages": ["en", "fr"],
            "noOtherLanguages": False,
            "prohibitedContent": [],
            "otherProhibitedContent": [],
            "federation": "all",
            "bots": "yes",
            "brands": "no",
        },
        "version": "2.4.0",
        "version_score": 240,
        "updatedAt": "2018-06-01T10:00:00.000Z",
        "second": 12,
        "checkedAt": "2018-06-01T10:00:00.000Z",
        "uptime_str": "99.8%",
        "score": 93.5,
        "dead": False,
        "connected": 850,
        "blacklisted": False,
    }
    record.update(overrides)
    return record


def make_document(instances: list[dict[str, Any]], total_users: int | None = None) -> dict[str, Any]:
    return {
        "instances": instances,
        "totalUsers": (
            total_users if total_users is not None else sum(i.get("users", 0) for i in instances)
        ),
        "languages": [
            {
                "iso639_1": "en",
                "iso639_2": "eng",
                "iso639_2en": "eng",
                "iso639_3": "eng",
                "name": ["English"],
                "nativeName": ["English"],
                "direction": "ltr",
                "family": "Indo-European",
                "countries": ["GB", "US"],
            }
        ],
        "countries": [
            {"code_2": "FR", "code_3": "FRA", "numCode": "250", "name": "France", "languages": ["fr"]}
        ],
        "prohibitedContent": {
            "nudity_nocw": "Nudity without CW",
            "spam": "Spam",
            "array": [{"code": "spam", "name": "Spam"}],
        },
    }


@pytest.fixture
def instance_record() -> dict[str, Any]:
    return make_instance()


@pytest.fixture
def document() -> dict[str, Any]:
    return make_document(
        [
            make_instance(),
            make_instance(
                _id="58f3c0e8d2bc4e5e7b6f0a02",
                name="big.example",
                users=20000,
                statuses=1_000_000,
                infos={"prohibitedContent": ["spam", "racism"], "otherProhibitedContent": ["x"]},
            ),
        ]
    )


@pytest.fixture
def payload(document: dict[str, Any]) -> bytes:
    return json.dumps(document).encode()


@pytest.fixture
def collected_at() -> datetime:
    return datetime(2018, 6, 1, 11, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def settings() -> Settings:
    """Settings built from explicit values, independent of the environment."""
    return Settings(
        source={
            "url": "https://instances.example/list.json",
            "retry_max_attempts": 3,
            "retry_base_delay_seconds": 0.0,
        },
        influx={"connection": "http://influx.test:8086"},
        api={"host": "127.0.0.1", "port": 18080},
    )
