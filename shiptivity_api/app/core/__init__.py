"""Configuration, logging, error kinds and SQLite access shared by the app."""
