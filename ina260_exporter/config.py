from pathlib import Path
from typing import Optional


def logging_config(log_file: Optional[Path] = None, verbose: bool = False) -> dict:
    level = 'DEBUG' if verbose else 'INFO'

    config = {
        'version': 1,
        'disable_existing_loggers': True,
        'formatters': {
            'default': {
                'format': '[%(asctime)s] [%(levelname)-5s] [%(name)s] %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S',
            },
        },
        'handlers': {
            'console': {
                'level': level,
                'formatter': 'default',
                'class': 'logging.StreamHandler',
            },
        },
        'loggers': {
            'ina260_exporter': {
                'handlers': ['console'],
                'level': level,
                'propagate': False,
            },
        },
        'root': {
            'handlers': ['console'],
            'level': 'ERROR'
        },
    }

    if log_file is not None:
        config['handlers']['file'] = {
            'level': 'DEBUG',
            'class': 'logging.handlers.TimedRotatingFileHandler',
            'formatter': 'default',
            'filename': str(log_file),
            'when': 'midnight',
            'backupCount': 5
        }
        config['loggers']['ina260_exporter']['handlers'].append('file')

    return config
