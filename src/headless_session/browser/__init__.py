"""Backend adapters for the supported automation backends."""
