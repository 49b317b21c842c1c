"""Built-in plugin registering the generators shipped with catgen."""

from __future__ import annotations

import pluggy

from catgen.generators.base import Generator
from catgen.generators.manifest import ManifestGenerator

hookimpl = pluggy.HookimplMarker("catgen")


class BuiltinGeneratorsPlugin:
    """Contributes the ``manifest`` generator."""

    @hookimpl
    def register_generators(self) -> dict[str, Generator]:
        generator = ManifestGenerator()
        return {generator.name: generator}
