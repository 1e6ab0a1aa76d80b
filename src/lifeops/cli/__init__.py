"""lifeops command-line interface (Typer + Rich)."""
