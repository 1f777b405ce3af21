"""Factory functions for creating ledger stores."""

import os
from pathlib import Path
from typing import Optional

from ledgercoder.ledger.files import FileLedgerStore


def create_file_store(root: Optional[str] = None) -> FileLedgerStore:
    """Create a file-backed ledger store.

    Args:
        root: Books directory. If None, checks the LEDGERCODER_ROOT environment
            variable, then defaults to the current working directory

    Returns:
        FileLedgerStore instance
    """
    if root is None:
        root = os.environ.get("LEDGERCODER_ROOT")

    if root is None:
        return FileLedgerStore(Path.cwd())

    return FileLedgerStore(Path(root).expanduser())
