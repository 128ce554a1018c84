"""
Constructs Module
Building blocks of the API stack
"""

from .compute import ComputeConstruct
from .http_api import HttpApiConstruct
from .monitoring import MonitoringConstruct
from .tagging import TaggingFramework

__all__ = [
    'ComputeConstruct',
    'HttpApiConstruct',
    'MonitoringConstruct',
    'TaggingFramework'
]
