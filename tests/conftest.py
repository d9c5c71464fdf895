"""Pytest fixtures for Mendix model export tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from mxexport.config import ApplicationConfig, ExportConfig
from mxexport.models import DomainModel, Module
from mxexport.repository import ModelRepository, ModelRepositoryError, ModelSnapshot


def make_entity(
    name: str,
    attributes: list[tuple[str, str]],
    persistable: bool | None = False,
    generalization: str | None = None,
) -> dict:
    """Build a Mendix entity JSON element.

    Args:
        name: Entity name
        attributes: (name, type) pairs, type without the DomainModels$ prefix
        persistable: Persistable flag of a root entity
        generalization: Qualified parent entity name for a specialization
    """
    if generalization:
        gen = {"$Type": "DomainModels$Generalization", "generalization": generalization}
    else:
        gen = {"$Type": "DomainModels$NoGeneralization", "persistable": persistable}

    return {
        "$Type": "DomainModels$Entity",
        "name": name,
        "generalization": gen,
        "attributes": [
            {
                "$Type": "DomainModels$Attribute",
                "name": attr_name,
                "type": {"$Type": f"DomainModels${attr_type}"},
            }
            for attr_name, attr_type in attributes
        ],
    }


class FakeSnapshot(ModelSnapshot):
    """In-memory snapshot; a module mapped to an exception fails on load."""

    def __init__(self, modules: dict[str, dict | Exception]):
        self.modules = modules
        self.loaded: list[str] = []

    def list_modules(self) -> list[Module]:
        return [Module(name=name) for name in self.modules]

    def load_domain_model(self, module: Module) -> DomainModel:
        self.loaded.append(module.name)
        data = self.modules[module.name]
        if isinstance(data, Exception):
            raise data
        return DomainModel.from_model_json(data)


class FakeRepository(ModelRepository):
    """In-memory repository keyed by app id."""

    def __init__(self, snapshots: dict[str, FakeSnapshot | Exception]):
        self.snapshots = snapshots
        self.requested: list[tuple[str, str]] = []

    def create_snapshot(self, app: ApplicationConfig) -> FakeSnapshot:
        self.requested.append((app.app_id, app.branch))
        snapshot = self.snapshots.get(app.app_id)
        if snapshot is None:
            raise ModelRepositoryError(f"App {app.app_id} not found")
        if isinstance(snapshot, Exception):
            raise snapshot
        return snapshot


@pytest.fixture
def alpha_domain_model() -> dict:
    """Domain model with one in-scope entity and two excluded ones."""
    return {
        "$Type": "DomainModels$DomainModel",
        "entities": [
            make_entity("E1", [("a1", "StringAttributeType"), ("a2", "IntegerAttributeType")]),
            make_entity("Stored", [("s1", "StringAttributeType")], persistable=True),
            make_entity(
                "Special",
                [("x1", "BooleanAttributeType")],
                generalization="M1.E1",
            ),
        ],
    }


@pytest.fixture
def fake_repository(alpha_domain_model) -> FakeRepository:
    """Repository where Alpha succeeds and Beta fails on snapshot creation."""
    return FakeRepository(
        {
            "alpha-id": FakeSnapshot({"M1": alpha_domain_model}),
            "beta-id": ModelRepositoryError("HTTP Error 403: Forbidden"),
        }
    )


@pytest.fixture
def sample_export_config() -> dict:
    """Sample mxexport.yaml configuration."""
    return {
        "applications": {
            "Alpha": {"app_id": "alpha-id"},
            "Beta": {"app_id": "beta-id", "branch": "develop"},
        },
        "paths": {
            "token_file": "config/token.txt",
            "results_dir": "results",
            "output_filename": "export.xlsx",
        },
        "repository": {
            "type": "platform",
            "base_url": "https://models.example.com/v1",
            "timeout": 10,
        },
    }


@pytest.fixture
def export_config(sample_export_config, tmp_path) -> ExportConfig:
    """ExportConfig writing into a temporary directory."""
    config = ExportConfig.from_dict(sample_export_config)
    config.paths.results_dir = str(tmp_path / "results")
    config.paths.token_file = str(tmp_path / "token.txt")
    return config


@pytest.fixture
def temp_config_dir(sample_export_config, tmp_path) -> Path:
    """Temporary directory with mxexport.yaml and a token file."""
    with open(tmp_path / "mxexport.yaml", "w") as f:
        yaml.dump(sample_export_config, f)

    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "token.txt").write_text("secret-token\n")

    return tmp_path


@pytest.fixture
def model_exports_dir(tmp_path, alpha_domain_model) -> Path:
    """Directory of local model JSON exports for Alpha and Beta."""
    root = tmp_path / "models"
    (root / "alpha-id").mkdir(parents=True)

    with open(root / "alpha-id" / "main.json", "w") as f:
        json.dump({"modules": [{"name": "M1", "domainModel": alpha_domain_model}]}, f)

    beta_model = {
        "entities": [make_entity("Session", [("token", "HashedStringAttributeType")])]
    }
    with open(root / "beta-id.json", "w") as f:
        json.dump({"modules": [{"name": "Auth", "domainModel": beta_model}]}, f)

    return root
