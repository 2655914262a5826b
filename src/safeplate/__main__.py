"""Main entry point for ``python -m safeplate``."""
from .cli import app

if __name__ == "__main__":
    app()
