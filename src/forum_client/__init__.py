"""
Forum Client - data-access layer between a forum UI and the forum service.

This package authenticates against the forum API, normalizes feeds, posts and
comments into domain records, and owns the persisted session and the local
community membership set.
"""

__version__ = "1.0.0"
__author__ = "Development Team"
__email__ = "dev@example.com"
