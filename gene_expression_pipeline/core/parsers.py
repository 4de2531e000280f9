#!/usr/bin/env python3

"""
File parsers for codon-property tables and input sequences.

Handles the space-separated codon table format and plain-text or FASTA
sequence input.
"""

import logging
from pathlib import Path
from typing import List, Optional, Tuple

import pyfaidx

from .data_structures import CodonEntry, CodonTable
from .exceptions import InputUnavailableError, ParseError

DEFAULT_CODON_TABLE = Path(__file__).resolve().parent.parent / "data" / "translation_table.txt"

FASTA_SUFFIXES = ('.fa', '.fasta', '.fna', '.ffn')


class CodonTableParser:
    """Parse a codon-property table: '<codon> <label> [<mass> <charge>]' per line."""

    def __init__(self, file_path: Optional[str] = None):
        self.file_path = str(file_path) if file_path else str(DEFAULT_CODON_TABLE)

    def parse(self) -> CodonTable:
        """Load the whole table. Malformed rows are kept with missing values."""
        logging.info(f"Loading codon table: {self.file_path}")

        try:
            with open(self.file_path, 'r', encoding='utf-8') as f:
                lines = f.read().replace('\r', '').split('\n')
        except OSError as e:
            raise ParseError(f"Codon table not readable: {e}", self.file_path)

        entries: List[CodonEntry] = []
        seen = set()
        for line_num, line in enumerate(lines, 1):
            if not line.strip():
                continue

            entry = self.parse_line(line, line_num)
            if entry.codon in seen:
                logging.warning(f"Duplicate codon {entry.codon} at line {line_num}, keeping first entry")
                continue
            seen.add(entry.codon)
            entries.append(entry)

        table = CodonTable(entries)
        logging.info(f"Loaded {len(table)} codons")
        return table

    def parse_line(self, line: str, line_num: int = 0) -> CodonEntry:
        """Convert one table row into a CodonEntry."""
        fields = line.split(' ')
        codon = fields[0].upper()
        amino_acid = fields[1] if len(fields) > 1 else ""

        if amino_acid == "STOP":
            if len(fields) != 2:
                logging.warning(f"Unexpected fields on STOP row at line {line_num}: {line!r}")
            return CodonEntry(codon=codon, amino_acid=amino_acid)

        if len(fields) != 4:
            logging.warning(f"Malformed codon row at line {line_num} "
                            f"(expected 4 fields, got {len(fields)}): {line!r}")

        mass = self._to_float(fields[2]) if len(fields) > 2 else None
        charge = self._to_int(fields[3]) if len(fields) > 3 else None
        return CodonEntry(codon=codon, amino_acid=amino_acid, mass=mass, charge=charge)

    @staticmethod
    def _to_float(value: str) -> Optional[float]:
        try:
            return float(value)
        except ValueError:
            return None

    @staticmethod
    def _to_int(value: str) -> Optional[int]:
        try:
            return int(value)
        except ValueError:
            return None


class SequenceReader:
    """Read raw sequence text from a plain-text or FASTA file."""

    def __init__(self, file_path: str):
        self.file_path = str(file_path)

    def read(self) -> List[Tuple[str, str]]:
        """Return (sequence_id, raw_text) pairs, one per independent invocation."""
        path = Path(self.file_path)
        if not path.is_file():
            raise InputUnavailableError("No such file", self.file_path)

        try:
            with open(path, 'r', encoding='utf-8') as f:
                raw_text = f.read()
        except OSError as e:
            raise InputUnavailableError(str(e), self.file_path)
        except UnicodeDecodeError as e:
            raise ParseError(f"Input is not valid UTF-8 text: {e}", self.file_path)

        if self.is_fasta(path):
            records = self._read_fasta()
        else:
            records = [(path.stem, raw_text)]

        logging.info(f"Read {len(records)} sequence(s) from {self.file_path}")
        return records

    @staticmethod
    def is_fasta(path: Path) -> bool:
        """FASTA is chosen by suffix; any other file is one plain-text sequence."""
        return path.suffix.lower() in FASTA_SUFFIXES

    def _read_fasta(self) -> List[Tuple[str, str]]:
        """Parse FASTA records with pyfaidx."""
        try:
            with pyfaidx.Fasta(self.file_path, as_raw=True) as fasta:
                return [(name, fasta[name][:]) for name in fasta.keys()]
        except (pyfaidx.FastaIndexingError, ValueError, OSError) as e:
            raise ParseError(f"Failed to parse FASTA file: {e}", self.file_path)
