"""
Infrastructure layer - external system integrations.
Keeps business logic clean from storage details.
"""

from . import catalog_store, identity_store

__all__ = ['catalog_store', 'identity_store']
