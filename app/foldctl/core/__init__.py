"""Core configuration and path management for foldctl."""
