# climate/security/logging_system.py
"""
Structured logging system for the climate controller.

Provides:
- Structured logging (JSON and plain text formats)
- Audit trail management
- Event classification
- Log rotation
- Integration with SimulationTime

Controller-specific features:
- Event severity levels
- Event types matching the controller's audit vocabulary
  (hvac_start, hvac_stop, energy_track, ...)
- Acting user context on audit entries
"""

import json
import logging
import logging.handlers
import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from climate.time.simulation_time import SimulationTime

__all__ = [
    "EventSeverity",
    "EventCategory",
    "LogEntry",
    "SimTimeFormatter",
    "JSONFormatter",
    "ClimateLogger",
    "configure_logging",
    "get_logger",
]

# ----------------------------------------------------------------
# Event Classification
# ----------------------------------------------------------------


class EventSeverity(Enum):
    """
    Event severity levels.

    Lower number = higher severity
    """

    CRITICAL = 1  # Controller cannot operate
    ALERT = 2  # Immediate action required
    ERROR = 3  # Error conditions, degraded operation
    WARNING = 4  # Warning conditions, potential issues
    NOTICE = 5  # Normal but significant events
    INFO = 6  # Informational messages
    DEBUG = 7  # Debug/diagnostic information


class EventCategory(Enum):
    """Controller event categories."""

    SECURITY = "security"  # Authorisation refusals, invalid input
    PROCESS = "process"  # Actuator start/stop
    ENERGY = "energy"  # Energy accounting
    AUDIT = "audit"  # User-initiated state changes
    SYSTEM = "system"  # Initialisation, shutdown
    DIAGNOSTIC = "diagnostic"  # Sensor health


# Map Python logging levels to severity
LOGGING_TO_SEVERITY = {
    logging.CRITICAL: EventSeverity.CRITICAL,
    logging.ERROR: EventSeverity.ERROR,
    logging.WARNING: EventSeverity.WARNING,
    logging.INFO: EventSeverity.INFO,
    logging.DEBUG: EventSeverity.DEBUG,
}

SEVERITY_TO_LOGGING = {
    EventSeverity.CRITICAL: logging.CRITICAL,
    EventSeverity.ALERT: logging.CRITICAL,
    EventSeverity.ERROR: logging.ERROR,
    EventSeverity.WARNING: logging.WARNING,
    EventSeverity.NOTICE: logging.INFO,
    EventSeverity.INFO: logging.INFO,
    EventSeverity.DEBUG: logging.DEBUG,
}


# ----------------------------------------------------------------
# Structured Log Entry
# ----------------------------------------------------------------


@dataclass
class LogEntry:
    """Structured log entry for controller events."""

    timestamp: datetime  # Simulation time when event occurred
    severity: EventSeverity
    category: EventCategory
    message: str

    # Context
    event_type: str = ""  # hvac_start, energy_track, ...
    device: str = ""
    component: str = ""
    user: str = ""

    # Additional data
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialisation."""
        entry_dict = {
            "timestamp": self.timestamp.isoformat(),
            "severity": self.severity.name,
            "category": self.category.value,
            "message": self.message,
        }

        # Add optional fields if present
        if self.event_type:
            entry_dict["event_type"] = self.event_type
        if self.device:
            entry_dict["device"] = self.device
        if self.component:
            entry_dict["component"] = self.component
        if self.user:
            entry_dict["user"] = self.user
        if self.data:
            entry_dict["data"] = json.dumps(self.data, default=str)

        return entry_dict

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict())

    def to_human_readable(self) -> str:
        """Convert to human-readable format."""
        event_str = f"{self.event_type}: " if self.event_type else ""
        user_str = f" ({self.user})" if self.user else ""
        return f"[{self.category.value}] {event_str}{self.message}{user_str}"


# ----------------------------------------------------------------
# Formatters for Python logging (with SimulationTime)
# ----------------------------------------------------------------


class SimTimeFormatter(logging.Formatter):
    """Format log records with simulation time prefix."""

    def __init__(self, sim_time: SimulationTime | None = None):
        super().__init__(
            fmt="[SIM:%(sim_time)s] [%(levelname)8s] %(name)s: %(message)s"
        )
        self.sim_time = sim_time

    def format(self, record: logging.LogRecord) -> str:
        """Format with simulation time."""
        now = self.sim_time.now() if self.sim_time else datetime.now()
        record.sim_time = now.strftime("%Y-%m-%dT%H:%M:%S")
        return super().format(record)


class JSONFormatter(logging.Formatter):
    """Format log records as JSON with simulation time."""

    def __init__(self, device: str = "", sim_time: SimulationTime | None = None):
        super().__init__()
        self.device = device
        self.sim_time = sim_time

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        severity = LOGGING_TO_SEVERITY.get(record.levelno, EventSeverity.INFO)

        log_entry = LogEntry(
            timestamp=self.sim_time.now() if self.sim_time else datetime.now(),
            severity=severity,
            category=EventCategory.SYSTEM,  # Default
            message=record.getMessage(),
            device=self.device,
            component=record.name,
        )

        # Add exception info if present
        if record.exc_info:
            log_entry.data["exception"] = self.formatException(record.exc_info)

        return log_entry.to_json()


# ----------------------------------------------------------------
# Climate Logger - Enhanced logging with structured output
# ----------------------------------------------------------------


class ClimateLogger:
    """
    Enhanced logger for controller components.

    Wraps Python's logging with controller-specific features:
    - Structured logging (JSON)
    - Event classification
    - Audit trail support
    - SimulationTime integration

    Safe to call from the scheduler thread and from foreground callers
    at the same time.
    """

    def __init__(
        self,
        name: str,
        device: str = "",
        log_dir: Path | None = None,
        enable_json: bool = True,
        enable_console: bool = True,
        sim_time: SimulationTime | None = None,
        level: int = logging.DEBUG,
        max_audit_entries: int = 10000,
    ):
        """
        Initialise climate logger.

        Args:
            name: Logger name (typically module name)
            device: Device name for context
            log_dir: Directory for log files (None = no file logging)
            enable_json: Enable JSON formatted logs (requires log_dir)
            enable_console: Enable console output
            sim_time: Clock used for timestamps (wall clock if None)
            level: Minimum level passed to handlers
            max_audit_entries: Maximum audit trail entries to retain
        """
        self.name = name
        self.device = device
        self.log_dir = log_dir
        self.sim_time = sim_time

        # Create Python logger
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)
        self.logger.propagate = False  # Don't propagate to root logger

        # Remove existing handlers
        self.logger.handlers.clear()

        if enable_console:
            self._add_console_handler(level)

        if enable_json and log_dir:
            self._add_json_handler(level)

        # Audit trail storage (in-memory)
        self.audit_trail: list[LogEntry] = []
        self._audit_lock = threading.Lock()
        self._max_audit_entries = max_audit_entries

    def _add_console_handler(self, level: int) -> None:
        """Add console handler with simulation time."""
        handler = logging.StreamHandler()
        handler.setLevel(level)
        handler.setFormatter(SimTimeFormatter(self.sim_time))
        self.logger.addHandler(handler)

    def _add_json_handler(self, level: int) -> None:
        """Add JSON file handler with rotation."""
        if not self.log_dir:
            return

        self.log_dir.mkdir(parents=True, exist_ok=True)
        log_file = self.log_dir / f"{self.device or 'climate'}.json.log"

        # Rotating file handler (10MB max, 5 backups)
        handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
        )
        handler.setLevel(level)
        handler.setFormatter(JSONFormatter(device=self.device, sim_time=self.sim_time))
        self.logger.addHandler(handler)

    # ----------------------------------------------------------------
    # Standard logging methods
    # ----------------------------------------------------------------

    def debug(self, message: str, **kwargs) -> None:
        """Log debug message."""
        self.logger.debug(message, **kwargs)

    def info(self, message: str, **kwargs) -> None:
        """Log info message."""
        self.logger.info(message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        """Log warning message."""
        self.logger.warning(message, **kwargs)

    def error(self, message: str, **kwargs) -> None:
        """Log error message."""
        self.logger.error(message, **kwargs)

    def critical(self, message: str, **kwargs) -> None:
        """Log critical message."""
        self.logger.critical(message, **kwargs)

    def exception(self, message: str, **kwargs) -> None:
        """Log exception with traceback."""
        self.logger.exception(message, **kwargs)

    # ----------------------------------------------------------------
    # Structured logging methods
    # ----------------------------------------------------------------

    def log_event(
        self,
        severity: EventSeverity,
        category: EventCategory,
        message: str,
        event_type: str = "",
        timestamp: datetime | None = None,
        **kwargs,
    ) -> LogEntry:
        """
        Log structured controller event.

        Args:
            severity: Event severity level
            category: Event category
            message: Event message
            event_type: Short event identifier (hvac_start, energy_track, ...)
            timestamp: Event time (defaults to the logger's clock)
            **kwargs: Additional context (user, component, data)

        Returns:
            LogEntry that was created
        """
        # Allow kwargs to override default device
        device = kwargs.pop("device", self.device)

        if timestamp is None:
            timestamp = self.sim_time.now() if self.sim_time else datetime.now()

        entry = LogEntry(
            timestamp=timestamp,
            severity=severity,
            category=category,
            message=message,
            event_type=event_type,
            device=device,
            **kwargs,
        )

        log_level = SEVERITY_TO_LOGGING.get(severity, logging.INFO)
        self.logger.log(log_level, entry.to_human_readable())

        # Store in audit trail if audit category
        if category in (EventCategory.AUDIT, EventCategory.SECURITY):
            with self._audit_lock:
                self.audit_trail.append(entry)
                # Trim if too long
                if len(self.audit_trail) > self._max_audit_entries:
                    self.audit_trail = self.audit_trail[-self._max_audit_entries :]

        return entry

    def log_audit(
        self,
        message: str,
        user: str = "",
        event_type: str = "",
        result: str = "",
        **kwargs,
    ) -> LogEntry:
        """
        Log audit trail event.

        Args:
            message: Audit message
            user: User who performed action
            event_type: Action performed (hvac_mode_change, ...)
            result: Result of action (ALLOWED, DENIED, etc.)
            **kwargs: Additional context

        Returns:
            LogEntry that was created
        """
        data = kwargs.pop("data", {})
        if result:
            data["result"] = result

        return self.log_event(
            severity=EventSeverity.NOTICE,
            category=EventCategory.AUDIT,
            message=message,
            event_type=event_type,
            user=user,
            data=data,
            **kwargs,
        )

    def log_security(
        self,
        message: str,
        severity: EventSeverity = EventSeverity.WARNING,
        **kwargs,
    ) -> LogEntry:
        """
        Log security event.

        Args:
            message: Security event message
            severity: Event severity
            **kwargs: Additional context

        Returns:
            LogEntry that was created
        """
        return self.log_event(
            severity=severity,
            category=EventCategory.SECURITY,
            message=message,
            **kwargs,
        )

    # ----------------------------------------------------------------
    # Audit trail access
    # ----------------------------------------------------------------

    def get_audit_trail(
        self,
        limit: int = 100,
        severity: EventSeverity | None = None,
        category: EventCategory | None = None,
        user: str | None = None,
    ) -> list[LogEntry]:
        """
        Get audit trail entries.

        Args:
            limit: Maximum number of entries to return
            severity: Filter by severity
            category: Filter by category
            user: Filter by acting user

        Returns:
            List of log entries (most recent last)
        """
        if limit <= 0:
            limit = 100

        with self._audit_lock:
            entries = list(self.audit_trail)

        # Apply filters first, then limit
        if severity:
            entries = [e for e in entries if e.severity == severity]
        if category:
            entries = [e for e in entries if e.category == category]
        if user:
            entries = [e for e in entries if e.user == user]

        return entries[-limit:]

    def clear_audit_trail(self) -> int:
        """
        Clear audit trail.

        Returns:
            Number of entries cleared
        """
        with self._audit_lock:
            count = len(self.audit_trail)
            self.audit_trail.clear()
            return count


# ----------------------------------------------------------------
# Global logger factory
# ----------------------------------------------------------------

_loggers: dict[str, ClimateLogger] = {}
_loggers_lock = threading.Lock()
_default_log_dir: Path | None = None
_default_level: int = logging.DEBUG


def configure_logging(
    log_dir: Path | str | None = None,
    level: int | str = logging.DEBUG,
) -> None:
    """
    Configure global logging settings.

    Only affects loggers created after the call.

    Args:
        log_dir: Directory for log files
        level: Minimum level for new loggers (name or number)
    """
    global _default_log_dir, _default_level

    if log_dir:
        _default_log_dir = Path(log_dir)
        _default_log_dir.mkdir(parents=True, exist_ok=True)

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    _default_level = level


def get_logger(name: str, device: str = "", **kwargs) -> ClimateLogger:
    """
    Get or create a climate logger.

    Thread-safe logger factory.

    Args:
        name: Logger name (typically __name__)
        device: Device name for context
        **kwargs: Additional ClimateLogger arguments

    Returns:
        ClimateLogger instance
    """
    logger_key = f"{name}:{device}"

    with _loggers_lock:
        if logger_key not in _loggers:
            # Use global defaults if not specified
            if "log_dir" not in kwargs and _default_log_dir:
                kwargs["log_dir"] = _default_log_dir
            if "level" not in kwargs:
                kwargs["level"] = _default_level

            _loggers[logger_key] = ClimateLogger(name, device, **kwargs)

        return _loggers[logger_key]
