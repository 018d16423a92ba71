"""Exception hierarchy for seaman.

All exceptions inherit from :class:`SeamanError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`seaman.exit_codes`.
The top-level error handler in :func:`seaman.app.main` catches
``SeamanError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    SeamanError (exit 1)
    +-- InvalidUsageError        (exit 2)
    +-- NotFoundError            (exit 4)
    +-- ConfigError              (exit 1)
    +-- ComposeError             (exit 6)
    +-- PluginError              (exit 10)
    |   +-- PluginNotFoundError
    |   +-- ConfigValidationError
    +-- LifecycleError           (exit 11)
"""

from __future__ import annotations

from typing import Optional

from seaman.exit_codes import (
    EXIT_COMPOSE_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_LIFECYCLE_ERROR,
    EXIT_NOT_FOUND,
    EXIT_PLUGIN_ERROR,
)


class SeamanError(Exception):
    """Base exception for all seaman errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`seaman.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SeamanError):
    """Raised for invalid CLI arguments, e.g. a database command on a cache service."""

    exit_code = EXIT_INVALID_USAGE


class NotFoundError(SeamanError):
    """Raised when a named service or file does not exist."""

    exit_code = EXIT_NOT_FOUND


class ConfigError(SeamanError):
    """Raised for project configuration problems (unreadable or invalid YAML)."""

    exit_code = EXIT_GENERIC_FAILURE


class ComposeError(SeamanError):
    """Raised when the ``docker compose`` binary cannot be executed."""

    exit_code = EXIT_COMPOSE_ERROR


class PluginError(SeamanError):
    """Base class for plugin registry and plugin configuration failures."""

    exit_code = EXIT_PLUGIN_ERROR


class PluginNotFoundError(PluginError):
    """Raised when the registry is asked for a plugin name it does not hold."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Plugin '{name}' not found")
        self.name = name


class ConfigValidationError(PluginError):
    """Raised when plugin configuration does not satisfy its schema.

    Validation is all-or-nothing: the first violated rule aborts and no
    partial configuration is produced.

    Args:
        message: Human-readable description naming the field and rule.
        field: The offending configuration field.
        plugin: Name of the plugin being configured, when known.
    """

    def __init__(
        self, message: str, field: str, plugin: Optional[str] = None
    ) -> None:
        super().__init__(message)
        self.field = field
        self.plugin = plugin

    @classmethod
    def invalid_value(cls, field: str, reason: str) -> ConfigValidationError:
        return cls(f"Invalid value for '{field}': {reason}", field=field)

    @classmethod
    def unknown_field(cls, field: str) -> ConfigValidationError:
        return cls(f"Unknown configuration field: '{field}'", field=field)

    def for_plugin(self, plugin: str) -> ConfigValidationError:
        """Return a copy of this error whose message names *plugin*."""
        return ConfigValidationError(
            f"Invalid configuration for plugin '{plugin}': {self}",
            field=self.field,
            plugin=plugin,
        )


class LifecycleError(SeamanError):
    """Raised by CLI commands when a plugin lifecycle handler fails.

    The original exception is chained as ``__cause__``.
    """

    exit_code = EXIT_LIFECYCLE_ERROR

    def __init__(self, event: str, error: BaseException) -> None:
        super().__init__(f"Lifecycle handler for '{event}' failed: {error}")
        self.event = event
