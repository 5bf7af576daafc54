"""Shared infrastructure for the Asset Compute worker platform.

Provides the invocation data model, the error hierarchy, worker settings,
the Temporal client connection factory, and task queue constants used by
the storage, worker, and hosting components.
"""
