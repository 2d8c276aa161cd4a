"""
Container Bindings

Binds record types to the container that stores them and to the rule that
derives a record's partition key value. The mapping is an immutable value
handed to the Database facade at construction time.

Two containers exist:

    data      partitioned on /language/id   (Lexeme)
    metadata  partitioned on /type          (Language, Project, BibliographicReference)
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional, Tuple


class ContainerName(str, Enum):
    """The closed set of containers in a DLx database."""
    DATA = "data"
    METADATA = "metadata"


class RecordType(str, Enum):
    """Values of the `type` discriminator on stored records."""
    LANGUAGE = "Language"
    LEXEME = "Lexeme"
    PROJECT = "Project"
    BIBLIOGRAPHIC_REFERENCE = "BibliographicReference"


@dataclass(frozen=True)
class ContainerBinding:
    """
    A container together with its partition key definition.

    Attributes:
        name: The container
        partition_key_path: Cosmos DB partition key path, e.g. "/language/id"
    """
    name: ContainerName
    partition_key_path: str

    @property
    def path_segments(self) -> Tuple[str, ...]:
        return tuple(self.partition_key_path.strip("/").split("/"))

    def partition_key_for(self, record: Mapping[str, Any]) -> Optional[Any]:
        """
        Derive a record's partition key value by following the key path.

        Returns None if any segment of the path is missing.
        """
        value: Any = record
        for segment in self.path_segments:
            if not isinstance(value, Mapping) or segment not in value:
                return None
            value = value[segment]
        return value


CONTAINER_BINDINGS: Mapping[ContainerName, ContainerBinding] = MappingProxyType({
    ContainerName.DATA: ContainerBinding(ContainerName.DATA, "/language/id"),
    ContainerName.METADATA: ContainerBinding(ContainerName.METADATA, "/type"),
})


def resolve_container(container: Any) -> ContainerName:
    """
    Resolve a container argument to a ContainerName.

    Accepts a ContainerName or its string value ("data", "metadata").

    Raises:
        ValueError: If the value does not name a known container.
    """
    if isinstance(container, ContainerName):
        return container
    try:
        return ContainerName(container)
    except ValueError:
        raise ValueError(
            f"Unknown container {container!r}. Expected one of {[c.value for c in ContainerName]}"
        )


class TypeMap(Mapping[RecordType, ContainerName]):
    """
    Immutable mapping of record types to containers.

    Example:
        ```python
        types = TypeMap.default()
        types[RecordType.LEXEME]           # ContainerName.DATA
        ```
    """

    def __init__(self, mapping: Mapping[Any, Any]):
        self._mapping: Mapping[RecordType, ContainerName] = MappingProxyType({
            RecordType(record_type): resolve_container(container)
            for record_type, container in mapping.items()
        })

    @classmethod
    def default(cls) -> "TypeMap":
        return cls({
            RecordType.LANGUAGE: ContainerName.METADATA,
            RecordType.LEXEME: ContainerName.DATA,
            RecordType.PROJECT: ContainerName.METADATA,
            RecordType.BIBLIOGRAPHIC_REFERENCE: ContainerName.METADATA,
        })

    def __getitem__(self, record_type: Any) -> ContainerName:
        return self._mapping[RecordType(record_type)]

    def __iter__(self) -> Iterator[RecordType]:
        return iter(self._mapping)

    def __len__(self) -> int:
        return len(self._mapping)
