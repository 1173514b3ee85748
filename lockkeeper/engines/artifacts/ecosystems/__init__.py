"""Built-in artifact ecosystems — auto-registered on import."""

from lockkeeper.engines.artifacts.ecosystems import mix  # noqa: F401
