"""
Environment variable loading utility.

Reads ``KEY=VALUE`` files so the route construction defaults in
``savings_router.settings`` can be tuned per deployment.
"""
import os
import logging

logger = logging.getLogger(__name__)


def load_env_from_file(file_path, override=False):
    """
    Load environment variables from a file.

    Blank lines and ``#`` comments are ignored, an optional ``export`` prefix
    is stripped and matching single or double quotes around values are removed.

    Args:
        file_path: Path to the environment variable file.
        override: Replace variables that are already set in the process.

    Returns:
        True if file was loaded successfully, False otherwise.
    """
    if not os.path.exists(file_path):
        logger.debug(f"Environment file not found: {file_path}")
        return False

    loaded = 0
    try:
        with open(file_path, 'r') as f:
            for line_number, line in enumerate(f, start=1):
                line = line.strip()
                if not line or line.startswith('#'):
                    continue
                if line.startswith('export '):
                    line = line[len('export '):]
                if '=' not in line:
                    logger.warning(f"Skipping malformed line {line_number} in {file_path}")
                    continue

                key, value = line.split('=', 1)
                key = key.strip()
                value = value.strip()
                if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
                    value = value[1:-1]

                if override or key not in os.environ:
                    os.environ[key] = value
                    loaded += 1

        logger.info(f"Loaded {loaded} environment variables from {file_path}")
        return True
    except OSError as e:
        logger.error(f"Error loading environment variables from {file_path}: {str(e)}")
        return False
