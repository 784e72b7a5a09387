"""chainabi - Schema driven ABI serialization for Antelope style chains."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("chainabi")
except PackageNotFoundError:
    __version__ = "(local)"
