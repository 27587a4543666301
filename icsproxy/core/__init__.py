"""Core infrastructure: configuration, logging, upstream fetching, timezones."""
