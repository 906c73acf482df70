"""Exception hierarchy for sitewatch."""

from __future__ import annotations


class SitewatchError(Exception):
    """Base class for all sitewatch errors."""


class ConfigError(SitewatchError):
    """The site configuration is missing, unreadable, or has no sites."""


class CaptureError(SitewatchError):
    """A single site's capture failed. Never propagated past the worker."""

    stage = "capture"


class NavigationError(CaptureError):
    stage = "navigate"


class NavigationTimeoutError(NavigationError):
    pass


class ReadinessError(CaptureError):
    stage = "ready"


class ReadinessTimeoutError(ReadinessError):
    pass


class CaptureIOError(CaptureError):
    stage = "screenshot"


class StorageEvictionError(SitewatchError):
    """An evicted run's artifact directory could not be removed."""
