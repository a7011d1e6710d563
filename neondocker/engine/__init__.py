"""Docker engine access: image lookup, container lifecycle."""
