"""leakscan scanner package.

Provides the rule loader, the regex engine that applies rules to content,
and the classifier that turns matches into display categories.
"""
