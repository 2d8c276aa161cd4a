"""
DLx Operations Exceptions

This module defines the root exceptions for the dlx_db package. Errors that
concern individual data operations live in
data_management_operations.data_ops_exceptions.
"""


class DlxOpsError(Exception):
    """Base exception for all dlx_db errors"""
    pass


class ConfigurationError(DlxOpsError):
    """Raised when configuration is invalid or missing"""
    pass


class ProductionDatabaseGuardError(DlxOpsError):
    """
    Raised when a destructive administrative operation targets the
    production database.

    This is intentionally not converted into a DatabaseResponse: there is no
    caller-recoverable path, so the error propagates to the caller.
    """

    def __init__(self, database_name: str):
        super().__init__(
            f'This error is here to guard against accidental deletion. Delete the '
            f'"{database_name}" database manually if you really do want to delete it.'
        )
        self.database_name = database_name
