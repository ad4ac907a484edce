"""
Утилиты для работы с URL и выбора движка
"""
from .utils import (
    Route,
    is_valid_url,
    classify_url,
)

__all__ = [
    'Route',
    'is_valid_url',
    'classify_url',
]
