from __future__ import annotations


class CombatLoggerError(Exception):
    """Base class for errors raised by the combat logger."""


class ConfigError(CombatLoggerError):
    """Raised when a configuration file is rejected in strict mode."""


class CommandExecutionError(CombatLoggerError):
    """A scripted command could not be dispatched to the host."""


class WorldAccessError(CombatLoggerError, IndexError):
    """A world write targeted a cell outside the loaded bounds."""


__all__ = [
    "CombatLoggerError",
    "ConfigError",
    "CommandExecutionError",
    "WorldAccessError",
]
