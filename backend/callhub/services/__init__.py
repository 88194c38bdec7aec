"""Services - registry, dispatcher and change notification built on core + infrastructure."""
