"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~seaman.exceptions.SeamanError` subclass.
Shell wrappers and CI scripts can inspect the exit code to determine the
failure class without parsing stderr.

Example::

    $ seaman plugin info acme/unknown
    $ echo $?
    10   # EXIT_PLUGIN_ERROR -- no plugin with that name was discovered
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_NOT_FOUND = 4
"""A requested service or file does not exist."""

EXIT_COMPOSE_ERROR = 6
"""The container-orchestration tool could not be invoked."""

EXIT_PLUGIN_ERROR = 10
"""A plugin could not be found or its configuration is invalid."""

EXIT_LIFECYCLE_ERROR = 11
"""A plugin lifecycle handler raised while the command was running."""

EXIT_INTERRUPTED = 130
"""The process was interrupted with Ctrl-C."""
