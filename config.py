# config.py

import os
import yaml
import logging

logger = logging.getLogger(__name__)

# Only pushes to this branch trigger a deploy.
PRIMARY_BRANCH = "master"

DEFAULT_PORT = 9000
DEFAULT_SHELL_PATH = "/run/current-system/profile/bin/bash"

# Repository name -> deploy script. Not configurable at runtime.
DEPLOY_SCRIPTS = {
    "0xhenrique-blog": "/srv/0xhenrique-blog/deploy.sh",
    "agora": "/srv/agora/deploy.sh",
    "agora-backend": "/srv/agora-backend/deploy.sh",
}


def load_config(config_path=None):
    """
    Load operational settings from the YAML file specified by CONFIG_PATH environment variable or the default path.

    A missing file is not an error: the server runs on its built-in defaults.

    Returns:
        dict: Parsed configuration dictionary.
    """
    if config_path is None:
        config_path = os.getenv("CONFIG_PATH", "config.yaml")

    if not os.path.exists(config_path):
        logger.info(f"Configuration file '{config_path}' not found. Using defaults.")
        return {}

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        logger.error(f"Error parsing YAML file '{config_path}': {e}")
        raise

    if not isinstance(config, dict):
        raise ValueError(f"Configuration file '{config_path}' must contain a mapping.")

    logger.info(f"Configuration loaded successfully from '{config_path}'.")
    return config


def get_port() -> int:
    """
    TCP port to listen on, from the PORT environment variable (default 9000 when unset or empty).
    """
    port = os.getenv("PORT", "")
    if not port:
        return DEFAULT_PORT
    try:
        return int(port)
    except ValueError:
        logger.error(f"Invalid PORT value: {port!r}")
        raise


def parse_timeout(value):
    """None or a non-positive value means the deploy may run forever."""
    if value is None or value == "":
        return None
    timeout = float(value)
    return timeout if timeout > 0 else None


# Load the configuration file
config = load_config()

SHELL_PATH = config.get("shell_path", DEFAULT_SHELL_PATH)
DEPLOY_TIMEOUT = parse_timeout(config.get("deploy_timeout"))
SERIALIZE_DEPLOYS = bool(config.get("serialize_deploys", False))
DEBUG_MODE = bool(config.get("debug", False))
