# -*- coding: utf-8 -*-

"""
DDNS Sync.

Requires Python 3.8 or later.

@license MIT
"""


class SyncError(Exception):
    """Base error for ddns_sync."""


class ConfigMissing(SyncError):
    """Raised when a required configuration value is absent."""


class DetectionFailure(SyncError):
    """Raised when the public address of the host cannot be determined."""


class InvalidAddress(SyncError, ValueError):
    """Raised when an IPv6 address (or fragment) cannot be parsed."""


class SuffixTooLarge(InvalidAddress):
    """Raised when a configured suffix expands to more than 9 bytes."""


class CollaboratorFailure(SyncError):
    """Raised when a DNS, firewall, cluster or other remote call fails."""
