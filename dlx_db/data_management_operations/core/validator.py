"""
Record Validator

Checks the shape of records before they are written. The store accepts any
JSON document, so validation is the only place where a Lexeme without a
language, or a record with an unknown type, is caught.

Validation is a collaborator of the Database facade: anything with a
`validate(record) -> None` method that raises RecordValidationError can be
injected instead of RecordValidator.

Typical usage:

    from dlx_db.data_management_operations import RecordValidator

    RecordValidator().validate({"type": "Language", "name": {"eng": "Chitimacha"}})
"""

import logging
from typing import Any, Dict, List, Optional, Protocol, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ...collection_operations.containers import RecordType
from ..data_ops_exceptions import RecordValidationError

logger = logging.getLogger(__name__)


class RecordBase(BaseModel):
    """Fields shared by every record kind."""
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    type: RecordType


class Reference(BaseModel):
    """Pointer to another record, e.g. `{"id": "..."}` entries in `projects`."""
    model_config = ConfigDict(extra="allow")

    id: str


class Permissions(BaseModel):
    model_config = ConfigDict(extra="allow")

    public: bool = False
    owners: List[str] = Field(default_factory=list)
    editors: List[str] = Field(default_factory=list)
    viewers: List[str] = Field(default_factory=list)


class Language(RecordBase):
    projects: List[Reference] = Field(default_factory=list)


class Lexeme(RecordBase):
    language: Reference
    projects: List[Reference] = Field(default_factory=list)


class Project(RecordBase):
    permissions: Permissions = Field(default_factory=Permissions)


class BibliographicReference(RecordBase):
    pass


_RECORD_MODELS: Dict[RecordType, Type[RecordBase]] = {
    RecordType.LANGUAGE: Language,
    RecordType.LEXEME: Lexeme,
    RecordType.PROJECT: Project,
    RecordType.BIBLIOGRAPHIC_REFERENCE: BibliographicReference,
}


class Validator(Protocol):
    """Anything that can check a record before it is written."""

    def validate(self, record: Dict[str, Any]) -> None:
        ...


class RecordValidator:
    """Validates records against the Pydantic model for their `type`."""

    def validate(self, record: Dict[str, Any]) -> None:
        """
        Validate a single record.

        Args:
            record: The record to validate. It is not modified.

        Raises:
            RecordValidationError: If the record is not a mapping, has an
                unknown type, or does not match its type's model.
        """
        if not isinstance(record, dict):
            raise RecordValidationError(
                f"Records must be objects, got {type(record).__name__}"
            )

        try:
            record_type = RecordType(record.get("type"))
        except ValueError:
            raise RecordValidationError(
                f"Unknown record type: {record.get('type')!r}",
                validation_errors=[f"type: must be one of {[t.value for t in RecordType]}"]
            )

        try:
            _RECORD_MODELS[record_type].model_validate(record)
        except ValidationError as e:
            errors = [
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                for err in e.errors()
            ]
            logger.debug(f"{record_type.value} record failed validation: {errors}")
            raise RecordValidationError(
                f"Invalid {record_type.value} record: {'; '.join(errors)}",
                validation_errors=errors
            )
