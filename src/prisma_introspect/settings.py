"""Process-wide settings, resolved once at startup and passed explicitly."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_DEFINITION_FILE = "prisma.yml"
DEFAULT_CONNECT_TIMEOUT_SECONDS = 30.0

CONFIG_PATH_ENV = "PRISMA_CONFIG_PATH"
TIMEOUT_ENV = "PRISMA_INTROSPECT_TIMEOUT"
ENVIRONMENT_ENV = "ENV"


class Settings(BaseModel):
    """Runtime configuration for one CLI invocation."""

    definition_path: Path = Field(description="Path to the project definition file (prisma.yml).")
    environment: str = Field(default="prod", description="'dev' when ENV=DEV, otherwise 'prod'.")
    connect_timeout: float = Field(default=DEFAULT_CONNECT_TIMEOUT_SECONDS, gt=0, description="Seconds.")
    env_file: Path | None = Field(default=None, description="Env file that was loaded, if any.")

    model_config = {"extra": "forbid", "frozen": True}

    @property
    def definition_dir(self) -> Path:
        """Directory the datamodel file is written to."""
        return self.definition_path.parent

    @property
    def is_dev(self) -> bool:
        return self.environment == "dev"


def load_settings(project: str | Path | None = None, env_file: str | Path | None = None) -> Settings:
    """Build :class:`Settings` from CLI options and the environment.

    When *env_file* is given its variables are loaded first (without
    overriding variables already set), so they can feed the lookups below.

    Raises:
        FileNotFoundError: If *env_file* does not exist.
    """
    env_path: Path | None = None
    if env_file is not None:
        env_path = Path(env_file)
        if not env_path.is_file():
            raise FileNotFoundError(f"Env file {env_path} does not exist.")
        load_dotenv(env_path, override=False)
        logger.debug("Loaded environment from %s", env_path)

    if project is not None:
        definition_path = Path(project)
    elif os.environ.get(CONFIG_PATH_ENV):
        definition_path = Path(os.environ[CONFIG_PATH_ENV])
    else:
        definition_path = Path.cwd() / DEFAULT_DEFINITION_FILE

    timeout_raw = os.environ.get(TIMEOUT_ENV)
    connect_timeout = float(timeout_raw) if timeout_raw else DEFAULT_CONNECT_TIMEOUT_SECONDS

    return Settings(
        definition_path=definition_path,
        environment="dev" if os.environ.get(ENVIRONMENT_ENV, "").upper() == "DEV" else "prod",
        connect_timeout=connect_timeout,
        env_file=env_path,
    )
