"""Version information for cli-task-runner."""

__version__ = "0.3.0"
