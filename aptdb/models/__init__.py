"""
Data models for the aptdb library.

Records are immutable value objects materialized from the store on every
read; nothing is cached between calls.
"""

from .airport import Airport
from .runway import Runway
from .country import Country
from .region import Region
from .validation import ReferenceIssue, ValidationResult

__all__ = [
    'Airport',
    'Runway',
    'Country',
    'Region',
    'ReferenceIssue',
    'ValidationResult',
]
