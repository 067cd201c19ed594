"""Allow ``python -m quickchange``."""

from quickchange.cli import app

app()
