"""leakscan pipeline package.

Dispatcher → work channel → worker pool → results channel → aggregator,
with a CompletionTracker signalling when the run has fully drained.
"""
