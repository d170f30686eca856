"""Infrastructure helpers: settings, logging setup and path conventions."""
