"""
Logging system for Thing Commander.

This module provides:
- File logging with rotation, one file per component
- Crash logging
- Command execution and shell interaction records
"""

import logging
import logging.handlers
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, Any, List, Tuple


class CommanderLogger:
    """Logging system for Thing Commander."""

    def __init__(self, config_dir: str, log_level: str = "INFO"):
        """
        Initialize the logging system.

        Args:
            config_dir: Configuration directory where logs will be stored
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        """
        self.config_dir = Path(config_dir)
        self.log_level = getattr(logging, log_level.upper())
        self.log_dir = self.config_dir / "logs"
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self._handlers: List[Tuple[logging.Logger, logging.Handler]] = []

        self._setup_loggers()
        self._setup_crash_logging()

        self.error_count = 0
        self.crash_count = 0
        self.command_count = 0

    def _setup_loggers(self):
        """Setup all loggers with proper handlers."""
        # Main application logger
        self.app_logger = logging.getLogger("thing_commander")
        self.app_logger.setLevel(self.log_level)

        # MQTT transport logger
        self.mqtt_logger = logging.getLogger("thing_commander.mqtt")
        self.mqtt_logger.setLevel(self.log_level)

        # Shell logger
        self.shell_logger = logging.getLogger("thing_commander.shell")
        self.shell_logger.setLevel(self.log_level)

        # Command logger
        self.command_logger = logging.getLogger("thing_commander.commands")
        self.command_logger.setLevel(self.log_level)

        # Component loggers keep their records out of the console
        for component_logger in (self.mqtt_logger, self.shell_logger, self.command_logger):
            component_logger.propagate = False

        self._setup_file_handlers()
        self._setup_console_handlers()

    def _add_handler(self, logger: logging.Logger, handler: logging.Handler):
        logger.addHandler(handler)
        self._handlers.append((logger, handler))

    def _setup_file_handlers(self):
        """Setup file handlers with rotation."""
        files = [
            (self.app_logger, "thing-commander.log", 10*1024*1024, 5),
            (self.mqtt_logger, "mqtt.log", 5*1024*1024, 3),
            (self.shell_logger, "shell.log", 5*1024*1024, 3),
            (self.command_logger, "commands.log", 5*1024*1024, 3),
        ]
        for logger, filename, max_bytes, backup_count in files:
            handler = logging.handlers.RotatingFileHandler(
                self.log_dir / filename,
                maxBytes=max_bytes,
                backupCount=backup_count
            )
            handler.setFormatter(self._get_formatter())
            self._add_handler(logger, handler)

    def _setup_console_handlers(self):
        """Setup console handler for warnings and errors of the application logger."""
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(self._get_console_formatter())
        self._add_handler(self.app_logger, console_handler)

    def _get_formatter(self):
        """Get detailed formatter for file logging."""
        return logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
        )

    def _get_console_formatter(self):
        """Get simple formatter for console output."""
        return logging.Formatter('%(levelname)s: %(message)s')

    def _setup_crash_logging(self):
        """Setup crash logging system."""
        self.crash_logger = logging.getLogger("thing_commander.crash")
        self.crash_logger.setLevel(logging.ERROR)
        self.crash_logger.propagate = False

        # No rotation for crash logs
        crash_handler = logging.FileHandler(self.log_dir / "crashes.log")
        crash_handler.setFormatter(self._get_formatter())
        self._add_handler(self.crash_logger, crash_handler)

    def log_crash(self, error: BaseException, context: str = ""):
        """Log a crash with full context."""
        self.crash_count += 1
        error_traceback = ''.join(
            traceback.format_exception(type(error), error, error.__traceback__))
        self.crash_logger.error(
            f"CRASH - {error}\n"
            f"Context: {context}\n"
            f"Timestamp: {datetime.now().isoformat()}\n"
            f"Traceback: {error_traceback}"
        )

    def log_command_execution(self, command: str, args: List[Any], success: bool,
                              duration: float):
        """Log command execution details."""
        self.command_count += 1
        if not success:
            self.error_count += 1
        status = "SUCCESS" if success else "FAILED"
        self.command_logger.info(
            f"Command: {command} {args} - {status} (duration: {duration:.3f}s)"
        )

    def log_shell_interaction(self, user_input: str, response_type: str = "command"):
        """Log shell interactions."""
        self.shell_logger.debug(
            f"Shell interaction - Type: {response_type}, Input: {user_input}"
        )

    def get_log_summary(self) -> Dict[str, Any]:
        """Get a summary of all logging activity."""
        return {
            'command_count': self.command_count,
            'error_count': self.error_count,
            'crash_count': self.crash_count,
            'log_files': {
                'main': str(self.log_dir / "thing-commander.log"),
                'mqtt': str(self.log_dir / "mqtt.log"),
                'shell': str(self.log_dir / "shell.log"),
                'commands': str(self.log_dir / "commands.log"),
                'crashes': str(self.log_dir / "crashes.log")
            }
        }

    def cleanup(self):
        """Log a final summary and release file handles."""
        summary = self.get_log_summary()
        self.app_logger.info(f"Logging session ended. Summary: {summary}")
        for logger, handler in self._handlers:
            logger.removeHandler(handler)
            handler.close()
        self._handlers = []

# Global logger instance
_global_logger: Optional[CommanderLogger] = None

def get_logger() -> CommanderLogger:
    """Get the global logger instance."""
    if _global_logger is None:
        raise RuntimeError("Logger not initialized. Call setup_logging() first.")
    return _global_logger

def get_logger_or_none() -> Optional[CommanderLogger]:
    """Get the global logger instance if logging has been set up."""
    return _global_logger

def setup_logging(config_dir: str, log_level: str = "INFO") -> CommanderLogger:
    """Setup the global logging system."""
    global _global_logger
    if _global_logger is not None:
        _global_logger.cleanup()
    _global_logger = CommanderLogger(config_dir, log_level)
    return _global_logger

def log_crash(error: BaseException, context: str = ""):
    """Log a crash using the global logger."""
    logger = get_logger()
    logger.log_crash(error, context)
