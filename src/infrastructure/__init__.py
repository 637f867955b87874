"""Infrastructure adapters implementing EDAL domain ports."""
