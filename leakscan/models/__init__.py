"""leakscan models package.

Defines the shared data contracts used across the scan pipeline:

  - scan.py — WorkItem, ContentBlob, Result, RunSummary
"""
