"""API apps, one package per route group."""
