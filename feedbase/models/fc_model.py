"""Attribute <-> column mapping and record encode/decode for mapped models."""

import json
import logging
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any, ClassVar

logger = logging.getLogger(__name__)


class PropertyMapping:
    """
    Immutable two-way table between model attributes and storage columns.

    Built once per model class. The mapping must be injective: two attributes
    cannot share a column.
    """

    def __init__(self, attribute_to_column: Mapping[str, str]):
        to_column = dict(attribute_to_column)
        to_attribute: dict[str, str] = {}
        for attribute, column in to_column.items():
            if column in to_attribute:
                raise ValueError(
                    f"Column '{column}' is mapped by both '{to_attribute[column]}' and '{attribute}'"
                )
            to_attribute[column] = attribute
        self._to_column = MappingProxyType(to_column)
        self._to_attribute = MappingProxyType(to_attribute)

    def column_for(self, attribute: str) -> str | None:
        return self._to_column.get(attribute)

    def attribute_for(self, column: str) -> str | None:
        return self._to_attribute.get(column)

    @property
    def attributes(self) -> list[str]:
        return list(self._to_column)

    @property
    def columns(self) -> list[str]:
        return list(self._to_attribute)

    def items(self) -> Iterator[tuple[str, str]]:
        """Yield `(attribute, column)` pairs in declaration order."""
        return iter(self._to_column.items())

    def as_dict(self) -> dict[str, str]:
        return dict(self._to_column)

    def __contains__(self, attribute: object) -> bool:
        return attribute in self._to_column

    def __len__(self) -> int:
        return len(self._to_column)

    def __repr__(self) -> str:
        return f"PropertyMapping({dict(self._to_column)!r})"


class FCModel:
    """
    Base class for models whose attributes map onto the columns of a record.

    Subclasses declare `__property_mapper__ = {attribute: column}` or override
    `fc_property_mapper()`. Attributes that are mapped but have no class-level
    default start out as None. A mapped attribute named like an inherited
    method (e.g. `count`) shadows that method on the instance; the class-level
    method stays reachable through the class.
    """

    __property_mapper__: ClassVar[dict[str, str]] = {}
    _fc_mapping: ClassVar[PropertyMapping] = PropertyMapping({})

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._fc_mapping = PropertyMapping(cls.fc_property_mapper())
        logger.debug("Built property mapping for %s: %s", cls.__name__, cls._fc_mapping)

    def __init__(self) -> None:
        for attribute in self._fc_mapping.attributes:
            if attribute in vars(self):
                continue
            default = getattr(type(self), attribute, None)
            if default is None or callable(default):
                setattr(self, attribute, None)

    @classmethod
    def fc_property_mapper(cls) -> dict[str, str]:
        """Return the `{attribute: column}` table of this model."""
        return dict(cls.__property_mapper__)

    @classmethod
    def fc_mapping(cls) -> PropertyMapping:
        return cls._fc_mapping

    def fc_encode(self) -> dict[str, Any]:
        """Return the current state as a record keyed by column name."""
        return {column: getattr(self, attribute, None) for attribute, column in self._fc_mapping.items()}

    def fc_generate(self, record: Mapping[str, Any]) -> "FCModel":
        """Load a record keyed by column name onto the mapped attributes; unknown columns are ignored."""
        for column, value in record.items():
            attribute = self._fc_mapping.attribute_for(column)
            if attribute is not None:
                setattr(self, attribute, value)
        return self

    def fc_pure_model(self) -> dict[str, Any]:
        """Return the current state keyed by attribute name."""
        return {attribute: getattr(self, attribute, None) for attribute in self._fc_mapping.attributes}

    def __str__(self) -> str:
        return f"{type(self).__name__}: {json.dumps(self.fc_pure_model(), indent=2, default=str)}"
