"""Core application plumbing: settings, logging, error taxonomy."""
