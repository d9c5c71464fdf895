"""
Classification rules applied while walking a domain model.

- Map an attribute's declared type to the label written to the workbook
- Select the entities that are in scope for the export
"""

from __future__ import annotations

from .models import AttributeTypeKind, Entity, GeneralizationKind


UNKNOWN_TYPE_LABEL = "Unknown"

ATTRIBUTE_TYPE_LABELS: dict[AttributeTypeKind, str] = {
    AttributeTypeKind.STRING: "String",
    AttributeTypeKind.INTEGER: "Integer",
    AttributeTypeKind.LONG: "Long",
    AttributeTypeKind.DECIMAL: "Decimal",
    AttributeTypeKind.BOOLEAN: "Boolean",
    AttributeTypeKind.DATE_TIME: "DateTime",
    AttributeTypeKind.ENUMERATION: "Enumeration",
    AttributeTypeKind.BINARY: "Binary",
    AttributeTypeKind.HASHED_STRING: "HashedString",
    AttributeTypeKind.AUTO_NUMBER: "AutoNumber",
}


def classify_attribute_type(kind: AttributeTypeKind) -> str:
    """Return the workbook label for a declared attribute type.

    Args:
        kind: Declared type of the attribute

    Returns:
        One of the fixed labels, or "Unknown" for unrecognized types
    """
    return ATTRIBUTE_TYPE_LABELS.get(kind, UNKNOWN_TYPE_LABEL)


def is_non_persistable_entity(entity: Entity) -> bool:
    """Check if an entity is a root, non-persistable entity.

    Specializations are always excluded: their persistability is governed by
    the root of the inheritance chain, which is not followed here.
    """
    if entity.generalization is not GeneralizationKind.NONE:
        return False
    return entity.persistable is False
