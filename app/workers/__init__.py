"""Background workers: the periodic care sweep and its CLI."""
