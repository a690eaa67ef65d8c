"""Core: settings, logging, errors and authentication."""
