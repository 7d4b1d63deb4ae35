"""Exception hierarchy for sysstat_pcp."""

from __future__ import annotations


class SysstatPcpError(Exception):
    """Base class for every error raised by this package."""


class RegistryError(SysstatPcpError):
    """A metric group or registry table is malformed."""


class DuplicateMetricError(RegistryError):
    """A metric identity or name is already registered."""


class MetricIndexError(RegistryError, IndexError):
    """A metric index is outside of its group."""


class UnknownMetricError(RegistryError, LookupError):
    """No metric is registered under the given identity or name."""


class InstanceConflictError(SysstatPcpError):
    """An instance declaration contradicts an earlier one in the same domain."""


class UnknownActivityError(SysstatPcpError):
    """A metric routes to an activity that is not part of this session."""


class DecodeError(SysstatPcpError, ValueError):
    """A value read back from an archive does not fit its descriptor or record."""


class ArchiveError(SysstatPcpError):
    """An archive is malformed, or a value references an undefined metric or instance."""
