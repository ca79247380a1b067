"""
core/logging_config.py - Centralized logging configuration.

All modules log through `logging.getLogger(__name__)`; this module only wires the root handler
once at application start.
"""
import logging
import sys

LOG_FORMAT = "%(asctime)s - %(levelname)s - [PID:%(process)d] - %(name)s - %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """
    Configures the global logging system.

    - Console output (stdout), Docker/Cloud Run compatible
    - Reduced verbosity for Google/Firebase client libraries
    """
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    for noisy in ("urllib3", "google", "google.auth", "grpc"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
