"""Logging utilities for the Shoutbox client.

The library only hands out named loggers. Handlers, levels and formats are
left to the application (the ``shoutbox`` CLI calls ``logging.basicConfig``
itself).

Example:
    Typical usage in a module::

        from shoutbox.logger import get_logger

        logger = get_logger("Shoutbox.smtp")
        logger.info("Message submitted")
"""

import logging


def get_logger(name: str = "Shoutbox") -> logging.Logger:
    """Return the standard library logger bound to ``name``.

    Args:
        name: The logger name. Defaults to "Shoutbox".

    Returns:
        A ``logging.Logger`` instance.
    """
    return logging.getLogger(name)
