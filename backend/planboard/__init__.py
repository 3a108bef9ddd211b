"""
Planboard - project scheduling engine (CPM, date cascading, conflict detection).
"""

__version__ = "0.1.0"
