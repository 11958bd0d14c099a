import json
import logging
import os
from typing import Optional

log = logging.getLogger(__name__)

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
DEPENDENCIES_PATH = os.path.join(PROJECT_ROOT, "config", "dependencies.json")


def _resolve_path(base: str, relative: str) -> str:
    return os.path.abspath(os.path.join(base, relative))


def configure_dependencies(deps_path: str = DEPENDENCIES_PATH) -> Optional[str]:
    """Return the Poppler binary directory used by pdf2image, if one is configured.

    The ``POPPLER_PATH`` environment variable wins when it names an existing
    directory. Otherwise ``poppler_path`` is read from config/dependencies.json
    (relative to the project root). ``None`` means "use Poppler from PATH".
    """
    env_path = os.environ.get("POPPLER_PATH")
    if env_path:
        if os.path.isdir(env_path):
            return env_path
        log.warning("POPPLER_PATH does not exist or is not a directory: %s", env_path)

    if not os.path.exists(deps_path):
        log.debug("dependencies.json not found at %s", deps_path)
        return None

    try:
        with open(deps_path, "r", encoding="utf-8") as deps_file:
            deps = json.load(deps_file) or {}
    except (OSError, ValueError) as exc:
        log.warning("Could not load dependencies from %s: %s", deps_path, exc)
        return None

    poppler_rel = deps.get("poppler_path")
    if not poppler_rel:
        return None

    base = os.path.dirname(os.path.dirname(os.path.abspath(deps_path)))
    candidate = _resolve_path(base, poppler_rel)
    if os.path.isdir(candidate):
        return candidate
    log.warning("Poppler path from config does not exist or is not a directory: %s", candidate)
    return None
