"""
complipilot/models/usage.py

Usage limiter results (per IP, per tool).
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict

MODE_ENFORCING = "enforcing"
MODE_MONITOR = "monitor-only"


class UsageStatus(BaseModel):
    """Read-only view of a caller's usage for one tool."""
    model_config = ConfigDict(frozen=True)

    allowed: bool
    count: int
    limit: int
    tool: str
    mode: str
    bypassed: bool = False
    reason: Optional[str] = None  # "unknown_ip" | "db_error" when failing open

    @property
    def has_reached_limit(self) -> bool:
        return not self.allowed

    def to_check_response(self) -> Dict[str, Any]:
        return {
            "reportCount": self.count,
            "hasReachedLimit": self.has_reached_limit,
            "limit": self.limit,
            "tool": self.tool,
            "mode": self.mode,
        }


class UsageIncrement(BaseModel):
    """Outcome of one atomic increment attempt."""
    model_config = ConfigDict(frozen=True)

    success: bool
    count: int
    limit: int
    tool: str
    mode: str
    limit_reached: bool = False
    bypassed: bool = False
    reason: Optional[str] = None

    def to_response(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "reportCount": self.count,
            "limit": self.limit,
            "tool": self.tool,
            "mode": self.mode,
        }
