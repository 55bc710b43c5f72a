"""Hourly collector of instances.mastodon.xyz statistics into InfluxDB."""

__version__ = "0.1.0"
