"""AppContext: shared Click context for all commands.

Created once by the root group and passed to subcommands via
``@click.pass_obj``. Builds the catalog lazily and owns result emission
(stdout/stderr routing and exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from catgen.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from catgen.config.settings import CatgenSettings
    from catgen.infrastructure.catalog import Catalog
    from catgen.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The catalog is created on first use so ``--help`` and ``--version``
    never touch the file tree or load plugins.
    """

    def __init__(self, settings: CatgenSettings) -> None:
        self.settings = settings
        self._catalog: Catalog | None = None

        from catgen.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose, quiet=settings.quiet, log_json=settings.log_json
        )

    @property
    def catalog(self) -> Catalog:
        """The catalog (created lazily, with plugins loaded when enabled)."""
        if self._catalog is None:
            from catgen.infrastructure.catalog import Catalog

            catalog = Catalog.from_settings(self.settings)
            if self.settings.plugins.enabled:
                catalog.init_plugins(local_dir=catalog.root / self.settings.plugins.local_dir)
            self._catalog = catalog
        return self._catalog

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: stdout; warnings go to stderr outside JSON mode.
        * Failure: stderr, exit code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
