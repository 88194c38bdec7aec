"""Infrastructure - persistence backends, module loading, file watching, logging."""
