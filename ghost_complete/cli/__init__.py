from .cli import CLI, main

__all__ = ["CLI", "main"]
