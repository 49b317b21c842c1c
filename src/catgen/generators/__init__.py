"""Source adapters producing discovery batches."""

from catgen.generators.base import Generator
from catgen.generators.manifest import ManifestGenerator

__all__ = ["Generator", "ManifestGenerator"]
