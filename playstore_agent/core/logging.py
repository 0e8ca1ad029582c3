import logging


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(f"playstore_agent.{name}")
    if not logger.handlers:
        handler = logging.StreamHandler()
        fmt = logging.Formatter("[%(levelname)s] %(name)s: %(message)s")
        handler.setFormatter(fmt)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger


"""
Logging setup and it configures:
- Log format
- Log level
- Output destination

The main purpose:
Standardized application logging for the A2A route, agent, tools and workflows.
"""
