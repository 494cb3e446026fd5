import logging
import os
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv
from sqlalchemy.orm import Session

from .db.utils import resolve_data_dir
from .draw.checksum import data_file_name, data_key
from .draw.session import DrawSession
from .models import SessionSnapshot

logger = logging.getLogger(__name__)

# Ensure environment variables from .env are loaded when this module is imported.
load_dotenv()

ROOT_DIR = Path(__file__).resolve().parents[1]

PathLike = Union[str, Path]


def default_data_dir() -> Path:
    """Return the data directory configured by ``LUCKYDRAW_DATA_DIR``.

    Relative values are resolved against the project root. Defaults to
    ``<project root>/data``.
    """
    return resolve_data_dir(os.getenv("LUCKYDRAW_DATA_DIR", "data"), ROOT_DIR)


def data_file_path(name: str, data_dir: Optional[PathLike] = None) -> Path:
    """Return the path of the data file holding session ``name``.

    Parameters
    ----------
    name : str
        Session name. The file stem is the uppercase MD5 hex of this name.
    data_dir : Optional[PathLike], default: None
        Directory holding session files. Defaults to :func:`default_data_dir`.
    """
    directory = Path(data_dir) if data_dir is not None else default_data_dir()
    return directory / data_file_name(name)


def load_prizes_csv_file(draw: DrawSession, path: PathLike) -> None:
    """Replace the prizes of ``draw`` with the rows of the CSV file at ``path``.

    The first row is treated as a header. ``OSError`` from opening the file
    propagates unchanged.
    """
    with open(path, newline="", encoding="utf-8") as fh:
        draw.load_prizes_csv(fh)


def load_participants_csv_file(draw: DrawSession, path: PathLike) -> None:
    """Replace the participants of ``draw`` with the rows of the CSV file at ``path``."""
    with open(path, newline="", encoding="utf-8") as fh:
        draw.load_participants_csv(fh)


def save_session_to_file(
    draw: DrawSession, data_dir: Optional[PathLike] = None
) -> Path:
    """Write ``draw`` to its data file, creating the data directory if needed.

    Returns
    -------
    Path
        Location of the written file.
    """
    path = data_file_path(draw.name, data_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        draw.save(fh)
    logger.info("Saved draw session %r to %s", draw.name, path)
    return path


def load_session_from_file(
    draw: DrawSession, data_dir: Optional[PathLike] = None
) -> Path:
    """Restore ``draw`` from its data file.

    Raises
    ------
    FileNotFoundError
        If no data file exists for the session.
    ChecksumMismatch
        If the file's winners do not match its checksum. ``draw`` is left
        unchanged.
    """
    path = data_file_path(draw.name, data_dir)
    with open(path, encoding="utf-8") as fh:
        draw.load(fh)
    logger.info("Loaded draw session %r from %s", draw.name, path)
    return path


def data_file_exists(draw: DrawSession, data_dir: Optional[PathLike] = None) -> bool:
    """Return whether a data file has been written for ``draw``."""
    return data_file_path(draw.name, data_dir).exists()


def archive_session(session: Session, draw: DrawSession) -> SessionSnapshot:
    """Store the current record of ``draw`` in the database.

    One snapshot is kept per session name; archiving again overwrites it.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session. The caller owns the transaction.
    draw : DrawSession
        Draw session to archive.

    Returns
    -------
    SessionSnapshot
        The inserted or updated snapshot, flushed so that ``id`` is populated.
    """
    record = draw.to_record()
    snapshot = SessionSnapshot.get_by_name(session, draw.name)
    if snapshot is None:
        snapshot = SessionSnapshot(
            name=draw.name,
            data_key=data_key(draw.name),
            payload=record,
        )
        session.add(snapshot)
    else:
        snapshot.apply_record(record)

    session.flush()
    logger.info("Archived draw session %r (checksum %s)", draw.name, snapshot.checksum)
    return snapshot


def restore_session(session: Session, draw: DrawSession) -> SessionSnapshot:
    """Replace the state of ``draw`` with its archived snapshot.

    Raises
    ------
    LookupError
        If no snapshot has been archived for the session name.
    ChecksumMismatch
        If the archived winners do not match the archived checksum.
    """
    snapshot = SessionSnapshot.get_by_name(session, draw.name)
    if snapshot is None:
        raise LookupError(f"No archived snapshot for draw session {draw.name!r}")

    draw.load_record(snapshot.payload)
    logger.info("Restored draw session %r from snapshot %s", draw.name, snapshot.id)
    return snapshot


__all__ = [
    "archive_session",
    "data_file_exists",
    "data_file_path",
    "default_data_dir",
    "load_participants_csv_file",
    "load_prizes_csv_file",
    "load_session_from_file",
    "restore_session",
    "save_session_to_file",
]
