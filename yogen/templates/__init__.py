# File: yogen/templates/__init__.py
"""Built-in Go templates (``*.go.j2``), loaded through ``importlib.resources``."""
