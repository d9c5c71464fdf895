"""
Mendix Model Export - Export Mendix domain model metadata for compliance review.

This package provides a CLI tool to:
- Read the domain models of a set of Mendix apps (model server or local JSON exports)
- Select the root, non-persistable entities of every module
- Write their attributes and types to one Excel worksheet per app

Configuration is managed through mxexport.yaml.
"""

__version__ = "1.0.0"

from .batch import ExportOutcome, RunStatus, run_export
from .classify import classify_attribute_type, is_non_persistable_entity
from .config import (
    ApplicationConfig,
    ConfigurationError,
    ExportConfig,
    load_config,
    read_platform_token,
)
from .extractor import ExtractionError, extract_application
from .models import (
    Attribute,
    AttributeTypeKind,
    DomainModel,
    Entity,
    ExportRow,
    GeneralizationKind,
    Module,
)
from .repository import (
    LocalModelRepository,
    ModelRepository,
    ModelRepositoryError,
    ModelSnapshot,
    PlatformModelRepository,
    create_repository,
)
from .workbook import generate_unique_worksheet_name

__all__ = [
    "ApplicationConfig",
    "Attribute",
    "AttributeTypeKind",
    "ConfigurationError",
    "DomainModel",
    "Entity",
    "ExportConfig",
    "ExportOutcome",
    "ExportRow",
    "ExtractionError",
    "GeneralizationKind",
    "LocalModelRepository",
    "ModelRepository",
    "ModelRepositoryError",
    "ModelSnapshot",
    "Module",
    "PlatformModelRepository",
    "RunStatus",
    "classify_attribute_type",
    "create_repository",
    "extract_application",
    "generate_unique_worksheet_name",
    "is_non_persistable_entity",
    "load_config",
    "read_platform_token",
    "run_export",
]
