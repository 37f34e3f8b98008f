from .storage_provider import LocalStorageProvider
from .sql_database_provider import SQLDatabaseProvider

__all__ = [
    'LocalStorageProvider',
    'SQLDatabaseProvider',
]
