"""Command modules registered on the shared PenPard typer app."""
