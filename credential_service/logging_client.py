"""
Logging client configuration for the credential service.
"""
import logging
import logging.handlers
from typing import Optional


def setup_logger(
    service_name: str,
    log_host: Optional[str] = None,
    log_port: int = 9999,
    level: str = "INFO",
    logger_name: Optional[str] = None
) -> logging.Logger:
    """
    Setup logger for the service, optionally forwarding to a centralized
    logging service.

    Args:
        service_name: Name of service (e.g. 'credential-service')
        log_host: Host of the centralized logging service, None for console only
        log_port: Port of the centralized logging service
        level: Log level name
        logger_name: Logger to configure, defaults to service_name. Pass the
            package name so module loggers propagate to it.

    Returns:
        Configured logger
    """
    logger = logging.getLogger(logger_name or service_name)
    logger.setLevel(level.upper())

    # Remove existing handlers
    logger.handlers = []

    # Add service name to all log records
    old_factory = logging.getLogRecordFactory()

    def record_factory(*args, **kwargs):
        record = old_factory(*args, **kwargs)
        record.service = service_name
        return record

    logging.setLogRecordFactory(record_factory)

    if log_host:
        socket_handler = logging.handlers.SocketHandler(log_host, log_port)
        logger.addHandler(socket_handler)

    console_handler = logging.StreamHandler()
    console_formatter = logging.Formatter(
        '%(asctime)s - [%(service)s] - %(levelname)s - %(message)s'
    )
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    return logger
