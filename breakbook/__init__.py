"""BreakBook — employee leave balance and leave request engine."""
