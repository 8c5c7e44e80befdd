"""Domain layer: forms, workflow graphs, templates and orders."""
