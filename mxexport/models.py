"""
Pydantic models for Mendix domain model metadata.

These models represent the subset of a Mendix app model that the exporter
walks (modules, entities, attributes and their declared types) and the rows
it writes to the output workbook. They also parse the JSON shape produced by
the Mendix model server, where every element carries a ``$Type`` tag.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


# Prefix used by the Mendix model server for domain model element types
DOMAIN_MODELS_PREFIX = "DomainModels$"


def _strip_prefix(type_tag: str | None) -> str:
    """Return a ``$Type`` tag without its ``DomainModels$`` prefix."""
    if not type_tag:
        return ""
    tag = str(type_tag).strip()
    if tag.startswith(DOMAIN_MODELS_PREFIX):
        return tag[len(DOMAIN_MODELS_PREFIX):]
    return tag


class AttributeTypeKind(str, Enum):
    """Declared type of a domain model attribute."""

    STRING = "StringAttributeType"
    INTEGER = "IntegerAttributeType"
    LONG = "LongAttributeType"
    DECIMAL = "DecimalAttributeType"
    BOOLEAN = "BooleanAttributeType"
    DATE_TIME = "DateTimeAttributeType"
    ENUMERATION = "EnumerationAttributeType"
    BINARY = "BinaryAttributeType"
    HASHED_STRING = "HashedStringAttributeType"
    AUTO_NUMBER = "AutoNumberAttributeType"
    OTHER = "Other"

    @classmethod
    def from_string(cls, value: str | None) -> AttributeTypeKind:
        """Parse a ``$Type`` tag such as ``DomainModels$StringAttributeType``.

        Tags outside the known set (``FloatAttributeType``,
        ``CurrencyAttributeType``, future additions) map to ``OTHER``.
        """
        tag = _strip_prefix(value)
        for kind in cls:
            if kind is not cls.OTHER and kind.value == tag:
                return kind
        return cls.OTHER


class GeneralizationKind(str, Enum):
    """Whether an entity inherits from another entity."""

    NONE = "NoGeneralization"
    GENERALIZATION = "Generalization"

    @classmethod
    def from_string(cls, value: str | None) -> GeneralizationKind:
        """Parse a generalization ``$Type`` tag.

        Anything other than an explicit ``NoGeneralization`` is treated as an
        inheritance relationship.
        """
        if _strip_prefix(value) == cls.NONE.value:
            return cls.NONE
        return cls.GENERALIZATION


class Attribute(BaseModel):
    """An entity attribute and its declared type."""

    name: str
    type: AttributeTypeKind = AttributeTypeKind.OTHER
    # Raw tag as received, kept for diagnostics
    type_tag: Optional[str] = None

    @classmethod
    def from_model_json(cls, data: dict[str, Any]) -> Attribute:
        """Create from a Mendix ``DomainModels$Attribute`` JSON element."""
        type_data = data.get("type") or {}
        if isinstance(type_data, str):
            type_tag = type_data
        else:
            type_tag = type_data.get("$Type")
        return cls(
            name=data["name"],
            type=AttributeTypeKind.from_string(type_tag),
            type_tag=type_tag,
        )


class Entity(BaseModel):
    """A domain model entity."""

    name: str
    generalization: GeneralizationKind = GeneralizationKind.NONE
    # Only meaningful when generalization is NONE
    persistable: Optional[bool] = None
    attributes: list[Attribute] = Field(default_factory=list)

    @classmethod
    def from_model_json(cls, data: dict[str, Any]) -> Entity:
        """Create from a Mendix ``DomainModels$Entity`` JSON element."""
        generalization = data.get("generalization") or {}
        kind = GeneralizationKind.from_string(generalization.get("$Type"))

        persistable = None
        if kind is GeneralizationKind.NONE:
            persistable = generalization.get("persistable")

        return cls(
            name=data["name"],
            generalization=kind,
            persistable=persistable,
            attributes=[
                Attribute.from_model_json(a) for a in data.get("attributes", [])
            ],
        )


class DomainModel(BaseModel):
    """The fully loaded domain model of one module."""

    entities: list[Entity] = Field(default_factory=list)

    @classmethod
    def from_model_json(cls, data: dict[str, Any]) -> DomainModel:
        """Create from a Mendix ``DomainModels$DomainModel`` JSON document."""
        return cls(
            entities=[Entity.from_model_json(e) for e in data.get("entities", [])]
        )


class Module(BaseModel):
    """A module of a Mendix app, as listed by a model snapshot."""

    name: str


class ExportRow(BaseModel):
    """A single row of the export workbook."""

    module_name: str
    entity_name: str
    attribute_name: str
    attribute_type: str

    def as_tuple(self) -> tuple[str, str, str, str]:
        """Return the row values in worksheet column order."""
        return (
            self.module_name,
            self.entity_name,
            self.attribute_name,
            self.attribute_type,
        )
