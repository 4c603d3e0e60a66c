"""Application logic: parsing, formatting and persistence use-cases."""
