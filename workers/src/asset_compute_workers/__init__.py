"""Unified worker runner for Asset Compute components.

Each service runs the same image with a different component argument to
select which registered worker to expose on which task queue.
"""
