"""leakscan — concurrent regex scanner for secrets in web content and local files."""

from leakscan.constants import VERSION

__version__ = VERSION
