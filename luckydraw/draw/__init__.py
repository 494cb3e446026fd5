"""Prize draw sessions: registries, winner selection and persistence."""

from .checksum import compute_winners_checksum, data_file_name, data_key
from .records import read_csv_rows
from .sampling import sample_without_replacement
from .session import DrawSession
from .types import Participant, Prize

__all__ = [
    "DrawSession",
    "Participant",
    "Prize",
    "compute_winners_checksum",
    "data_file_name",
    "data_key",
    "read_csv_rows",
    "sample_without_replacement",
]
