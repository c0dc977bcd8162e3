"""foldctl - Recursive folder-tree operations over local and FTP transports."""

__version__ = "0.1.0"
