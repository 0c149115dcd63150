"""
Observers attached to the device system's change channels.

SelectionPersistenceObserver writes the selection to storage on change.
"""

from .selection_persistence import SelectionPersistenceObserver

__all__ = [
    'SelectionPersistenceObserver',
]
