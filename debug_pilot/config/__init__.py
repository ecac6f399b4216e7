"""Settings models and settings file loading."""
