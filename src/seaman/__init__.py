"""seaman -- container-based local development environments with plugins.

This package provides a command-line tool that manages a project's local
services (databases, caches, mail catchers, ...) on top of ``docker
compose``. Every service is contributed by a *plugin*: a few ship with the
tool, projects can drop their own into ``.seaman/plugins/``, and third-party
distributions can register them through the ``seaman.plugins`` entry-point
group.

Typical workflow::

    seaman init            # write .seaman/seaman.yaml with plugin defaults
    seaman start           # bring the environment up
    seaman plugin list     # see which plugins were discovered

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models shared across the package.
    config: Project root resolution and project configuration files.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    plugins: Plugin discovery, configuration, lifecycle and adapters.
    services: Service abstraction and the service registry.
    compose: Boundary around the ``docker compose`` command line.
    scaffold: Jinja2 rendering of new plugin skeletons.
"""

__version__ = "0.4.0"
