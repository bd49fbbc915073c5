#!/usr/bin/env python
"""
Entry point for the medical records project.  It sets the default settings
module to ``medrecords.settings`` and delegates to Django's management
command line utility.
"""
import os
import sys


def main() -> None:
    """Run administrative tasks for the project."""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'medrecords.settings')
    try:
        from django.core.management import execute_from_command_line  # type: ignore
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Is it installed and available on your "
            "PYTHONPATH? Did you forget to activate a virtual environment?"
        ) from exc
    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
