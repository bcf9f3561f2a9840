"""Domain models, calculations, API client, and renderers."""
