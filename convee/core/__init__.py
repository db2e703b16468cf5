"""Settings, shared enums and logging setup."""
