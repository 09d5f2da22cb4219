"""Settings and source configuration."""
