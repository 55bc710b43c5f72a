"""Reshape an instance snapshot into InfluxDB metric points.

Two measurements are produced per cycle:

- ``totals``: one point with snapshot-wide counts, including the cumulative
  ``above<N>`` user buckets.
- ``instances``: one point per instance, tagged with identity, policy flags
  and the allowed/banned state of every known prohibited-content category.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType

from .models import InstanceRecord, InstanceSnapshot

TOTALS_MEASUREMENT = "totals"
INSTANCES_MEASUREMENT = "instances"

USER_THRESHOLDS: tuple[int, ...] = (2, 5, 10, 50, 100, 500, 1000, 5000, 10000)

ALLOWED = "allowed"
BANNED = "banned"

# Point tag name -> code the upstream uses in infos.prohibitedContent
PROHIBITED_CONTENT_CATEGORIES: Mapping[str, str] = MappingProxyType(
    {
        "nudityNocw": "nudity_nocw",
        "nudityAll": "nudity_all",
        "pornographyNocw": "pornography_nocw",
        "pornographyAll": "pornography_all",
        "sexism": "sexism",
        "racism": "racism",
        "illegalContentLinks": "illegalContentLinks",
        "spam": "spam",
        "advertising": "advertising",
        "hateSpeeches": "hateSpeeches",
        "harrassment": "harrassment",
        "spoilersNocw": "spoilers_nocw",
    }
)

# Either spelling of a category resolves to its tag name
_CATEGORY_TAG_BY_NAME: dict[str, str] = {
    **{code: tag for tag, code in PROHIBITED_CONTENT_CATEGORIES.items()},
    **{tag: tag for tag in PROHIBITED_CONTENT_CATEGORIES},
}

FieldValue = int | float | str


@dataclass(frozen=True)
class MetricPoint:
    """A single timestamped point destined for the time-series store."""

    measurement: str
    tags: Mapping[str, str]
    fields: Mapping[str, FieldValue]
    time: datetime

    def to_influx(self) -> dict[str, object]:
        """Render as the dict shape accepted by ``InfluxDBClient.write_points``."""
        return {
            "measurement": self.measurement,
            "tags": dict(self.tags),
            "fields": dict(self.fields),
            "time": self.time,
        }


def _bool_tag(value: bool) -> str:
    return "true" if value else "false"


def category_tags(prohibited: list[str]) -> dict[str, str]:
    """Allowed/banned state for every known category.

    Entries that are not a known category are ignored.
    """
    tags = {tag: ALLOWED for tag in PROHIBITED_CONTENT_CATEGORIES}
    for entry in prohibited:
        tag = _CATEGORY_TAG_BY_NAME.get(entry)
        if tag is not None:
            tags[tag] = BANNED
    return tags


def build_totals_point(
    snapshot: InstanceSnapshot, timestamp: datetime, source_url: str
) -> MetricPoint:
    fields: dict[str, FieldValue] = {
        "totalUsers": snapshot.total_users,
        "totalInstances": snapshot.total_instances,
        "totalStatuses": snapshot.total_statuses,
    }
    for threshold in USER_THRESHOLDS:
        fields[f"above{threshold}"] = snapshot.users_above(threshold)

    return MetricPoint(
        measurement=TOTALS_MEASUREMENT,
        tags=MappingProxyType({"scrapedFrom": source_url}),
        fields=MappingProxyType(fields),
        time=timestamp,
    )


def build_instance_point(
    instance: InstanceRecord, snapshot: InstanceSnapshot, timestamp: datetime
) -> MetricPoint:
    infos = instance.infos
    tags: dict[str, str] = {
        "id": instance.id,
        "name": instance.name,
        "httpsRank": instance.https_rank,
        "obsRank": instance.obs_rank,
        "up": _bool_tag(instance.up),
        "openRegistrations": _bool_tag(instance.open_registrations),
        "optOut": _bool_tag(infos.opt_out),
        "noOtherLanguages": _bool_tag(infos.no_other_languages),
        "federation": infos.federation,
        "bots": infos.bots,
        "brands": infos.brands,
        "version": instance.version,
        "dead": _bool_tag(instance.dead),
        "blacklisted": _bool_tag(instance.blacklisted),
        "otherProhibitedContent": "yes" if infos.other_prohibited_content else "no",
    }
    tags.update(category_tags(infos.prohibited_content))

    fields: dict[str, FieldValue] = {
        "score": float(instance.score),
        "connected": instance.connected,
        "languages": len(infos.languages),
        "obsScore": instance.obs_score,
        "httpsScore": instance.https_score,
        "usersChangeRatio": instance.users_change_ratio,
        "downchecks": instance.downchecks,
        "upchecks": instance.upchecks,
        "uptime": float(instance.uptime),
        "users": instance.users,
        "statuses": instance.statuses,
        "connections": instance.connections,
        "totalUsers": snapshot.total_users,
        "totalInstances": snapshot.total_instances,
    }

    return MetricPoint(
        measurement=INSTANCES_MEASUREMENT,
        tags=MappingProxyType(tags),
        fields=MappingProxyType(fields),
        time=timestamp,
    )


def build_instance_points(snapshot: InstanceSnapshot, timestamp: datetime) -> list[MetricPoint]:
    """One point per instance, in snapshot order."""
    return [build_instance_point(instance, snapshot, timestamp) for instance in snapshot.instances]


def build_points(
    snapshot: InstanceSnapshot, timestamp: datetime, source_url: str
) -> list[MetricPoint]:
    """Totals point first, then every instance point."""
    points = [build_totals_point(snapshot, timestamp, source_url)]
    points.extend(build_instance_points(snapshot, timestamp))
    return points
