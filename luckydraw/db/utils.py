from pathlib import Path
from typing import Union


def resolve_sqlite_url(url: str, project_root: Path) -> str:
    """Resolve 'sqlite:///./relative/path' to an absolute sqlite:/// URL.

    Keeps other URL forms unchanged.
    """
    prefix = "sqlite:///./"
    if not url.startswith(prefix):
        return url
    rel = url[len(prefix) :]
    return f"sqlite:///{(project_root / rel).resolve()}"


def resolve_data_dir(path: Union[str, Path], project_root: Path) -> Path:
    """Resolve a data directory setting, anchoring relative paths at ``project_root``."""
    candidate = Path(path).expanduser()
    if candidate.is_absolute():
        return candidate
    return (project_root / candidate).resolve()
