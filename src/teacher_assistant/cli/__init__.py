"""
CLI module for teacher-assistant.

Provides a command-line interface for trying the relay against the
configured LLM provider and checking the settings.
"""

from teacher_assistant.cli.main import cli

__all__ = ["cli"]
