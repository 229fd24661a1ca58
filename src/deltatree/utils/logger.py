"""Logger namespacing for deltatree.

Every module logs through ``get_logger(__name__)`` so all records land under
the ``deltatree`` logger. The library only emits ``debug`` records and never
attaches handlers; applications opt in with, for example::

    logging.getLogger("deltatree").setLevel(logging.DEBUG)
"""

import logging

ROOT_LOGGER_NAME = "deltatree"


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name``, placed under the ``deltatree`` namespace.

    Module names inside the package (``deltatree.parser``) are used as is;
    anything else is prefixed.

    Example:
        >>> get_logger("mymodule").name
        'deltatree.mymodule'
        >>> get_logger("deltatree.parser").name
        'deltatree.parser'
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
