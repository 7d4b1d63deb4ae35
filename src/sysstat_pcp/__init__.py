"""sysstat_pcp – marshal sysstat activity samples to and from PCP-style metric archives."""

__version__ = "0.1.0"
