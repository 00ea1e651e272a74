"""Domain models and option catalogs."""
