"""
Gunicorn configuration for Starship Saboteur.

A single eventlet worker serves every Socket.IO connection; rooms and their
tick tasks live in that worker's memory.
"""

import logging
import sys

import yaml

from config_factory import load_config
from src.content_manager import ContentManager, ContentValidationError

# Named app_config so it does not shadow gunicorn's own `config`
app_config = load_config()

bind = f"{app_config.host}:{app_config.port}"
backlog = 2048

workers = 1
worker_class = "eventlet"
worker_connections = app_config.worker_connections
timeout = app_config.timeout
keepalive = app_config.keepalive

# Recycling the worker would drop every running mission
max_requests = 0

accesslog = "-"
errorlog = "-"
loglevel = app_config.log_level

proc_name = "starship-saboteur"
preload_app = False
daemon = False


def on_starting(server):
    """Refuse to start when the ship content file is missing or incomplete."""
    logger = logging.getLogger(__name__)
    content_file = app_config.content_file
    logger.info(f"Validating {content_file} before starting workers...")
    try:
        ContentManager(content_file).load_content_from_yaml()
    except (FileNotFoundError, yaml.YAMLError, ContentValidationError) as e:
        logger.critical(f"FATAL: Ship content validation failed. Server shutting down. Error: {e}")
        sys.exit(1)
    logger.info("Ship content validated")


def worker_exit(server, worker):
    server.log.info(f"Worker {worker.pid} exiting; active missions in it are lost")
