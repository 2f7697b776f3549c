"""Project definition file (``prisma.yml``) handling."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


@dataclass
class ProjectDefinition:
    """A loaded ``prisma.yml``. ``data`` is empty when the file does not exist."""

    path: Path
    data: dict[str, Any] = field(default_factory=dict)
    exists: bool = False

    @classmethod
    def load(cls, path: Path) -> ProjectDefinition:
        """Read *path* if present.

        Raises:
            ValueError: If the file is not YAML or does not contain a mapping.
        """
        if not path.is_file():
            return cls(path=path)
        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ValueError(f"{path} is not valid YAML: {exc}") from exc
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ValueError(f"{path} must contain a YAML mapping.")
        return cls(path=path, data=raw, exists=True)

    @property
    def has_datamodel(self) -> bool:
        return bool(self.data.get("datamodel"))

    def add_datamodel(self, file_name: str) -> None:
        """Reference *file_name* as the project's datamodel and save the file."""
        self.data["datamodel"] = file_name
        self.path.write_text(yaml.safe_dump(self.data, sort_keys=False), encoding="utf-8")
