"""Configuration, credentials, and dashboard assembly."""
