"""Sample records and per-activity buffers."""

from .activity import ACTIVITY_SPECS, Activity, ActivityId, ActivitySpec, build_activities

__all__ = ["ACTIVITY_SPECS", "Activity", "ActivityId", "ActivitySpec", "build_activities"]
