"""Package manifest model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Manifest(BaseModel):
    """Identity and step commands declared by a package.

    ``build`` and ``install`` are always populated (defaults applied by the
    reader); ``test`` is ``None`` when the package declares no test step.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    build: str
    install: str
    test: str | None = None
    extra: dict[str, str] = {}

    @property
    def install_key(self) -> str:
        """Directory name under ``pkg/`` for this name/version pair."""
        return f"{self.name}-{self.version}"
