"""
Stacks Module
Resource-definition units deployed inside an environment stage
"""

from .api_stack import ApiStack

__all__ = [
    'ApiStack'
]
