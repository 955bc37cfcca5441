"""
Writes rendered entries, preceded by an optional header file, to a file or stdout.
"""
import logging
import os
import sys
from typing import List, Optional, TextIO

logger = logging.getLogger(__name__)


def read_header(header_file: Optional[str]) -> Optional[str]:
    """
    Read the header file contents.

    Returns:
        Optional[str]: The header text, or None if unset or unreadable.
    """
    if not header_file:
        return None
    path = os.path.expanduser(header_file)
    try:
        with open(path, encoding="utf-8") as f:
            return f.read()
    except OSError as e:
        logger.warning(f"Unable to read header file {path}: {e}")
        return None


def write_entries(lines: List[str], stream: TextIO, header: Optional[str] = None) -> None:
    if header:
        stream.write(header if header.endswith("\n") else header + "\n")
    for line in lines:
        stream.write(line + "\n")


def write_output(lines: List[str], output_file: Optional[str] = None, header_file: Optional[str] = None) -> None:
    """
    Write entries to ``output_file``, or stdout when it is not set.

    Args:
        lines (List[str]): Rendered entries.
        output_file (str, optional): Destination path.
        header_file (str, optional): File whose contents precede the entries.
    """
    header = read_header(header_file)
    if not output_file:
        write_entries(lines, sys.stdout, header)
        return

    path = os.path.expanduser(output_file)
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        write_entries(lines, f, header)
    logger.info(f"Wrote {len(lines)} entries to {path}")
