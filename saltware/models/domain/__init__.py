"""
Domain models - storage-agnostic representations
"""
from .content import (
    CollectionKind,
    ContentRecord,
    Service,
    Employee,
    Project,
    Industry,
    Stat,
    RECORD_TYPES,
    record_type,
    coerce_int,
)
from .identity import Identity

__all__ = [
    'CollectionKind',
    'ContentRecord',
    'Service',
    'Employee',
    'Project',
    'Industry',
    'Stat',
    'RECORD_TYPES',
    'record_type',
    'coerce_int',
    'Identity',
]
