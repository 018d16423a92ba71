"""Template overrides contributed by plugins.

A :class:`~seaman.plugins.capabilities.TemplateProvider` plugin can replace
any template seaman renders (for instance ``"compose/postgresql.yaml.j2"``)
with a file of its own. :class:`TemplateResolver` folds the overrides of
all registered plugins into one mapping; when two plugins override the same
template, the one registered later wins.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from seaman.plugins.capabilities import extract_template_overrides

if TYPE_CHECKING:
    from seaman.plugins.registry import PluginRegistry

logger = logging.getLogger(__name__)

TEMPLATES_DIRNAME = "templates"


@dataclass(frozen=True)
class TemplateOverride:
    """Replace *original_template* with the file at *override_path*."""

    original_template: str
    override_path: Path


class TemplateResolver:
    def __init__(self, registry: PluginRegistry) -> None:
        self.registry = registry

    def get_overrides(self) -> dict[str, Path]:
        """Return original template name to override path, later plugins winning."""
        overrides: dict[str, Path] = {}
        for loaded in self.registry:
            for override in extract_template_overrides(loaded.instance):
                if override.original_template in overrides:
                    logger.debug(
                        "Plugin '%s' replaces override of '%s'",
                        loaded.name,
                        override.original_template,
                    )
                overrides[override.original_template] = Path(override.override_path)
        return overrides

    def get_plugin_template_paths(self) -> dict[str, Path]:
        """Return each plugin's ``templates/`` directory, for plugins that have one.

        The directory is looked up next to the file defining the plugin class.
        """
        paths: dict[str, Path] = {}
        for loaded in self.registry:
            try:
                source_file = Path(inspect.getfile(type(loaded.instance)))
            except TypeError:
                continue
            templates_dir = source_file.parent / TEMPLATES_DIRNAME
            if templates_dir.is_dir():
                paths[loaded.name] = templates_dir
        return paths
