"""Pipeline components.

This package contains the input loaders, the confirmation-line hash
extraction, the positional merge and the JSON writer used by the runner.
"""
