"""Infrastructure: storage adapters, archive reader, and persistence."""
