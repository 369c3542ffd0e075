"""
Logger factory for transferpy.

Each area logs under its own name:

    transferpy.agent              external upload agent processes
    transferpy.keyring            keyring backends and the index
    transferpy.crypto             encryption service
    transferpy.upload.coordinator pipeline stages
    transferpy.upload.sink        result notifications
    transferpy.client             client facade

Nothing here adds handlers; output goes wherever the application's root
logger sends it. ``transferpy.setup_logging`` adjusts all levels at once.
"""
import logging


def get_logger(name: str) -> logging.Logger:
    """
    Return the logger of a transferpy area.

    Records propagate to the root logger. When the application has not
    configured logging (root logger without handlers) the area logger
    is capped at WARNING, so pipeline INFO/DEBUG chatter stays quiet in
    library use.

    Args:
        name: One of the ``transferpy.*`` area names

    Returns:
        The area logger
    """
    logger = logging.getLogger(name)
    logger.propagate = True

    if not logging.getLogger().handlers:
        logger.setLevel(logging.WARNING)

    return logger
