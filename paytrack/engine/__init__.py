"""
Calculation engine.

Pure functions over models: no storage, no notifications, no clock
unless one is passed in.
"""

from paytrack.engine.forecast import calculate_forecast, forecast_status
from paytrack.engine.grouping import group_logs
from paytrack.engine.materializer import build_log, existing_slots, plan_missing_logs

__all__ = [
    "build_log",
    "calculate_forecast",
    "existing_slots",
    "forecast_status",
    "group_logs",
    "plan_missing_logs",
]
