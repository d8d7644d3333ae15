import logging
import sys
from typing import Any, Dict, Union

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

PACKAGE_LOGGERS = [
    'bun_docs_mcp',
    'bun_docs_mcp.core',
    'bun_docs_mcp.transport',
]


def _normalize_level(level: Union[int, str]) -> Union[int, str]:
    """Numeric levels (``10`` or ``"10"``) become ints; names are upper-cased."""
    text = str(level).strip()
    if text.isdigit():
        return int(text)
    return text.upper()


def _reset_root_handlers(root_logger: logging.Logger) -> None:
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)


def setup_logging(level: Union[int, str] = 'INFO', protocol: str = 'stdio') -> None:
    """
    Configure logging for the Bun Docs MCP proxy.

    All records go to stderr: in stdio mode stdout carries JSON-RPC messages only.

    Args:
        level: Logging level (default: 'INFO')
        protocol: 'stdio' for the MCP server, 'cli' for direct search mode
    """
    root_logger = logging.getLogger()
    _reset_root_handlers(root_logger)
    root_logger.setLevel(_normalize_level(level))

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
    root_logger.addHandler(stderr_handler)

    for logger_name in PACKAGE_LOGGERS:
        logger = logging.getLogger(logger_name)
        logger.setLevel(_normalize_level(level))
        logger.propagate = True
        logger.handlers = []

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    root_logger.debug(f"Logging configured for {protocol} mode. All logs will be written to stderr.")


def setup_logging_from_config(logging_config: Dict[str, Any]) -> None:
    """
    Set up logging from the ``logging`` section of the configuration file.
    Supports StreamHandler (always stderr) and FileHandler entries.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(_normalize_level(logging_config.get('level', 'INFO')))
    _reset_root_handlers(root_logger)

    formatter = logging.Formatter(logging_config.get('format', DEFAULT_FORMAT))
    handlers = logging_config.get('handlers') or [{'type': 'StreamHandler'}]
    for handler_cfg in handlers:
        if handler_cfg.get('type') == 'StreamHandler':
            handler = logging.StreamHandler(sys.stderr)
        elif handler_cfg.get('type') == 'FileHandler':
            handler = logging.FileHandler(handler_cfg['filename'])
        else:
            continue
        handler.setLevel(_normalize_level(handler_cfg.get('level', logging_config.get('level', 'INFO'))))
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
