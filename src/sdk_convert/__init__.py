"""Conversion of legacy MSBuild projects to SDK-style projects."""

import importlib.metadata

__license__ = "MIT"
__version__ = importlib.metadata.version("sdk-convert")
