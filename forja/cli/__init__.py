"""CLI de forja (typer + rich)."""
