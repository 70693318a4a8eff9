"""Infrastructure layer - persistence, HTTP integrations, observability."""
