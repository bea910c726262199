"""
Logging configuration for uvicorn that anonymizes wallet addresses.
"""
import hashlib
import logging
import re
from typing import Any, Dict

# bech32 Secret Network addresses and hex (0x...) addresses of 40+ digits
ADDRESS_PATTERN = re.compile(r'\b(secret1[qpzry9x8gf2tvdw0s3jn54khce6mua7l]{38,}|0x[0-9a-fA-F]{40,})\b')


def anonymize_address(address: str) -> str:
    hashed = hashlib.sha256(address.encode()).hexdigest()[:12]
    return f"wallet-{hashed}"


class AddressAnonymizingFilter(logging.Filter):
    """Filter that replaces wallet addresses in log records with stable hashes."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.args:
            # Render first so addresses passed as %-style arguments are caught too
            record.msg = record.getMessage()
            record.args = None
        record.msg = ADDRESS_PATTERN.sub(lambda m: anonymize_address(m.group(1)), str(record.msg))
        return True


LOGGING_CONFIG: Dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "filters": {
        "anonymize_address": {
            "()": AddressAnonymizingFilter,
        },
    },
    "formatters": {
        "default": {
            "()": "uvicorn.logging.DefaultFormatter",
            "fmt": "%(levelprefix)s %(message)s",
            "use_colors": None,
        },
        "access": {
            "()": "uvicorn.logging.AccessFormatter",
            "fmt": '%(levelprefix)s %(client_addr)s - "%(request_line)s" %(status_code)s',
        },
        "app": {
            "format": "%(asctime)s %(levelname)s %(name)s | %(message)s",
        },
    },
    "handlers": {
        "default": {
            "formatter": "default",
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stderr",
        },
        "access": {
            "formatter": "access",
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stdout",
        },
        "app": {
            "formatter": "app",
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stderr",
            "filters": ["anonymize_address"],
        },
    },
    "loggers": {
        "uvicorn": {
            "handlers": ["default"],
            "level": "INFO",
        },
        "uvicorn.error": {
            "level": "INFO",
        },
        "uvicorn.access": {
            "handlers": ["access"],
            "level": "INFO",
            "propagate": False,
        },
        "services": {"handlers": ["app"], "level": "INFO", "propagate": False},
        "routers": {"handlers": ["app"], "level": "INFO", "propagate": False},
        "dependencies": {"handlers": ["app"], "level": "INFO", "propagate": False},
    },
}
