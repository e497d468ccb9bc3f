"""
Source adapter module initialization.
"""

from pulse.scrapers.base import BaseSourceAdapter, ExtractionAdapter, FETCH_HEADERS
from pulse.scrapers.jsonld import JsonLdAdapter
from pulse.scrapers.registry import SOURCES, merge_order, validate_sources

__all__ = [
    'BaseSourceAdapter',
    'ExtractionAdapter',
    'FETCH_HEADERS',
    'JsonLdAdapter',
    'SOURCES',
    'merge_order',
    'validate_sources',
]
