"""
Model repositories for reading Mendix app models.

Supports reading from:
- The Mendix model server (temporary working copies, via HTTPS)
- Local model JSON exports (offline runs and fixtures)
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from .config import (
    DEFAULT_BASE_URL,
    ApplicationConfig,
    ConfigurationError,
    RepositoryConfig,
)
from .models import DomainModel, Module


USER_AGENT = "Mendix-Model-Exporter/1.0"


class ModelRepositoryError(RuntimeError):
    """Raised when a model snapshot cannot be created or read."""


class ModelSnapshot(ABC):
    """A read-only, point-in-time view of one app model."""

    @abstractmethod
    def list_modules(self) -> list[Module]:
        """List the modules of the model, in model order."""
        pass

    @abstractmethod
    def load_domain_model(self, module: Module) -> DomainModel:
        """Load the full domain model of a module."""
        pass


class ModelRepository(ABC):
    """Abstract base class for model sources."""

    @abstractmethod
    def create_snapshot(self, app: ApplicationConfig) -> ModelSnapshot:
        """Create a snapshot of an app model at its configured branch."""
        pass

    def describe(self) -> str:
        """Short description of the source for progress messages."""
        return type(self).__name__


class PlatformSnapshot(ModelSnapshot):
    """Snapshot backed by a temporary working copy on the model server."""

    def __init__(self, repository: PlatformModelRepository, working_copy_id: str):
        self.repository = repository
        self.working_copy_id = working_copy_id

    def _path(self, *parts: str) -> str:
        quoted = "/".join(quote(p, safe="") for p in parts)
        return f"/working-copies/{quote(self.working_copy_id, safe='')}/{quoted}"

    def list_modules(self) -> list[Module]:
        data = self.repository.request("GET", self._path("modules"))
        if isinstance(data, dict):
            data = data.get("modules", [])
        return [Module(name=m["name"]) for m in data]

    def load_domain_model(self, module: Module) -> DomainModel:
        data = self.repository.request(
            "GET", self._path("modules", module.name, "domain-model")
        )
        return DomainModel.from_model_json(data or {})


class PlatformModelRepository(ModelRepository):
    """Read app models from the Mendix model server.

    Every request is authenticated with a personal access token, which needs
    the ``mx:modelrepository:repo:read`` scope.
    """

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 120,
    ):
        """Initialize the platform repository.

        Args:
            token: Mendix personal access token
            base_url: Base URL of the model server API
            timeout: Timeout in seconds for each HTTP request
        """
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def describe(self) -> str:
        return f"Mendix model server ({self.base_url})"

    def request(self, method: str, path: str, payload: dict | None = None) -> Any:
        """Send a request to the model server and decode the JSON response.

        Args:
            method: HTTP method
            path: Path relative to the base URL
            payload: Optional JSON body

        Returns:
            Decoded JSON response (None for an empty body)

        Raises:
            ModelRepositoryError: On HTTP, network or decoding errors
        """
        url = f"{self.base_url}{path}"
        data = json.dumps(payload).encode("utf-8") if payload is not None else None

        request = Request(
            url,
            data=data,
            method=method,
            headers={
                "Accept": "application/json",
                "Content-Type": "application/json",
                "Authorization": f"MxToken {self.token}",
                "User-Agent": USER_AGENT,
            },
        )

        try:
            with urlopen(request, timeout=self.timeout) as response:
                body = response.read().decode("utf-8")
        except HTTPError as e:
            raise ModelRepositoryError(
                f"HTTP Error {e.code} for {method} {url}: {e.reason}"
            ) from e
        except URLError as e:
            raise ModelRepositoryError(f"URL Error for {method} {url}: {e.reason}") from e
        except (OSError, UnicodeDecodeError) as e:
            # Timeouts and resets while reading the response are not wrapped by urlopen
            raise ModelRepositoryError(f"Read error for {method} {url}: {e}") from e

        if not body:
            return None

        try:
            return json.loads(body)
        except json.JSONDecodeError as e:
            raise ModelRepositoryError(f"JSON decode error for {method} {url}: {e}") from e

    def create_snapshot(self, app: ApplicationConfig) -> PlatformSnapshot:
        path = (
            f"/apps/{quote(app.app_id, safe='')}"
            f"/branches/{quote(app.branch, safe='')}/working-copies"
        )
        data = self.request("POST", path, payload={})
        if not isinstance(data, dict) or not data.get("id"):
            raise ModelRepositoryError(
                f"Model server returned no working copy id for app {app.app_id}"
            )
        return PlatformSnapshot(self, str(data["id"]))


class LocalSnapshot(ModelSnapshot):
    """Snapshot read from a model JSON export."""

    def __init__(self, source: Path, data: dict[str, Any]):
        self.source = source
        self._modules: dict[str, dict[str, Any]] = {}
        for module_data in data.get("modules", []):
            self._modules[module_data["name"]] = module_data

    def list_modules(self) -> list[Module]:
        return [Module(name=name) for name in self._modules]

    def load_domain_model(self, module: Module) -> DomainModel:
        module_data = self._modules.get(module.name)
        if module_data is None:
            raise ModelRepositoryError(
                f"Module '{module.name}' not found in {self.source}"
            )
        return DomainModel.from_model_json(module_data.get("domainModel") or {})


class LocalModelRepository(ModelRepository):
    """Read app models from JSON exports in a directory.

    Looks up ``<root>/<app_id>/<branch>.json`` first, then ``<root>/<app_id>.json``.
    """

    def __init__(self, root: str | Path):
        self.root = Path(root)
        if not self.root.is_dir():
            raise FileNotFoundError(f"Model directory not found: {self.root}")

    def describe(self) -> str:
        return f"local model exports ({self.root})"

    def _find_export(self, app: ApplicationConfig) -> Path:
        candidates = [
            self.root / app.app_id / f"{app.branch}.json",
            self.root / f"{app.app_id}.json",
        ]
        for candidate in candidates:
            if candidate.exists():
                return candidate
        raise ModelRepositoryError(
            f"No model export for app {app.app_id} (branch {app.branch}) in {self.root}"
        )

    def create_snapshot(self, app: ApplicationConfig) -> LocalSnapshot:
        path = self._find_export(app)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ModelRepositoryError(f"JSON decode error in {path}: {e}") from e
        return LocalSnapshot(path, data)


def create_repository(
    config: RepositoryConfig,
    token: str | None = None,
) -> PlatformModelRepository | LocalModelRepository:
    """Factory function to create the configured model repository.

    Args:
        config: Repository settings
        token: Personal access token (required for the platform type)

    Returns:
        Configured model repository
    """
    if config.type == "local":
        if not config.path:
            raise ConfigurationError("repository.path is required for the local repository")
        return LocalModelRepository(config.path)

    if config.type == "platform":
        if not token:
            raise ConfigurationError("A token is required for the platform repository")
        return PlatformModelRepository(
            token=token,
            base_url=config.base_url,
            timeout=config.timeout,
        )

    raise ConfigurationError(f"Unknown repository type: {config.type}")
