import abc
from dataclasses import dataclass
from dataclasses import fields
from typing import Dict
from typing import List

from warrenform.models.core.common import AttributeRef


@dataclass(frozen=True)
class WarrenResourceProperties(abc.ABC):
    """
    Abstract base dataclass listing the attributes of a Warren resource.

    Subclasses declare one AttributeRef field per attribute. Every resource has a
    computed `id` and an optional `location` that routes its calls to another
    location than the provider's one.
    """

    id: AttributeRef = AttributeRef("id", computed=True)
    location: AttributeRef = AttributeRef("location", optional=True, requires_replace=True, input_only=True)

    def __post_init__(self):
        if self.__class__ == WarrenResourceProperties:
            raise TypeError("Cannot instantiate abstract class.")

    def attributes(self) -> List[AttributeRef]:
        return [getattr(self, f.name) for f in fields(self)]

    def by_name(self) -> Dict[str, AttributeRef]:
        return {attribute.name: attribute for attribute in self.attributes()}


@dataclass(frozen=True)
class WarrenResourceSchema(abc.ABC):
    """
    Abstract base dataclass for the schema of a Warren resource type.
    """

    @property
    @abc.abstractmethod
    def type_name(self) -> str:
        """
        :return: The resource type name, e.g. `warren_disk`.
        """
        pass

    @property
    @abc.abstractmethod
    def properties(self) -> WarrenResourceProperties:
        pass

    def required_attributes(self) -> List[str]:
        return [a.name for a in self.properties.attributes() if a.required]

    def input_only_attributes(self) -> List[str]:
        return [a.name for a in self.properties.attributes() if a.input_only]

    def sensitive_attributes(self) -> List[str]:
        return [a.name for a in self.properties.attributes() if a.sensitive]
