"""Core module - logging and the application error taxonomy."""

from .exceptions import (
    SereneMindError,
    BadRequest,
    SessionNotFound,
    StorageUnavailable,
    CorruptRecord,
    ProviderError,
    InvalidEvaluationFormat,
)

__all__ = [
    'SereneMindError',
    'BadRequest',
    'SessionNotFound',
    'StorageUnavailable',
    'CorruptRecord',
    'ProviderError',
    'InvalidEvaluationFormat',
]
