"""anchorpress command-line interface (Typer + Rich)."""
