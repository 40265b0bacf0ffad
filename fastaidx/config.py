"""Package defaults and environment overrides."""

import os
from dataclasses import dataclass
from typing import Optional

LOG_LEVEL_ENV = "FASTAIDX_LOG_LEVEL"

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


@dataclass(frozen=True)
class FastaDefaults:
    """
    Defaults shared by the readers, the writer and the CLI.

    Attributes:
        index_extension: Suffix appended to a FASTA path to find its index
        encoding: Text encoding used for headers and index names
        line_terminator: Terminator emitted by the writer and index writer
    """
    index_extension: str = ".fai"
    encoding: str = "utf-8"
    line_terminator: bytes = b"\n"


DEFAULTS = FastaDefaults()


def env_log_level() -> Optional[str]:
    """Return the log level requested through the environment, if any."""
    value = os.environ.get(LOG_LEVEL_ENV, "").strip().upper()
    return value or None
