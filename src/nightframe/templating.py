"""Kida template rendering for ``Controller.render``.

One Environment per (template directory, autoescape) pair, created on
first use and reused for the life of the process.
"""

import threading
from functools import lru_cache
from pathlib import Path
from typing import Any

from kida import Environment, FileSystemLoader

_env_lock = threading.Lock()


@lru_cache(maxsize=8)
def _create_environment(template_dir: str, autoescape: bool) -> Environment:
    return Environment(loader=FileSystemLoader(template_dir), autoescape=autoescape)


def get_environment(template_dir: str | Path, *, autoescape: bool = True) -> Environment:
    """Return the shared kida Environment for *template_dir*."""
    with _env_lock:
        return _create_environment(str(Path(template_dir).resolve()), autoescape)


def render_template(
    template_name: str,
    context: dict[str, Any],
    *,
    template_dir: str | Path,
    autoescape: bool = True,
) -> str:
    """Render *template_name* from *template_dir* to a string."""
    env = get_environment(template_dir, autoescape=autoescape)
    return env.get_template(template_name).render(context)
