#!/usr/bin/env python3

"""
Core data structures for the gene expression pipeline.

Defines the value types that flow between pipeline stages: signal matches,
transcripts, exon fragments, splice variants, coding sequences, codon table
entries and translated protein records.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple


@dataclass(frozen=True)
class Match:
    """A pattern occurrence within a searched sequence."""
    text: str
    start: int

    def __post_init__(self):
        """Validate match data after initialization."""
        if self.start < 0:
            raise ValueError(f"Invalid match offset: {self.start}")

    @property
    def end(self) -> int:
        """Offset one past the last matched symbol."""
        return self.start + len(self.text)

    @property
    def length(self) -> int:
        return len(self.text)


@dataclass(frozen=True)
class Transcript:
    """An RNA transcript bounded by one promoter and one terminator."""
    promoter: Match
    terminator: Match
    start_index: int
    end_index: int
    sequence: str

    def __post_init__(self):
        """Validate transcript data after initialization."""
        if self.start_index > self.end_index:
            raise ValueError(f"Invalid transcript coordinates: {self.start_index}-{self.end_index}")
        if self.terminator.start < self.promoter.start:
            raise ValueError(
                f"Terminator at {self.terminator.start} lies upstream of promoter at {self.promoter.start}"
            )

    @property
    def id(self) -> str:
        return f"P{self.promoter.start}-T{self.terminator.start}"

    @property
    def length(self) -> int:
        return len(self.sequence)


@dataclass(frozen=True)
class ExonFragment:
    """A contiguous slice of a transcript lying between intron boundaries."""
    index: int
    sequence: str

    @property
    def length(self) -> int:
        return len(self.sequence)


@dataclass(frozen=True)
class SpliceVariant:
    """Concatenation of the exon fragments selected by an inclusion mask."""
    mask: int
    fragment_count: int
    sequence: str

    def __post_init__(self):
        if not 0 <= self.mask < (1 << self.fragment_count):
            raise ValueError(f"Mask {self.mask} out of range for {self.fragment_count} fragments")

    @property
    def included_fragments(self) -> List[int]:
        """Indices of the fragments whose bit is set in the mask."""
        return [i for i in range(self.fragment_count) if (self.mask >> i) & 1]

    @property
    def is_empty(self) -> bool:
        return not self.sequence


@dataclass(frozen=True)
class CodingSequence:
    """Span from a start codon (inclusive) to an in-frame stop codon (exclusive)."""
    sequence: str
    start_offset: int
    stop_offset: int
    stop_codon: str = ""

    def __post_init__(self):
        """Validate coding sequence data after initialization."""
        if len(self.sequence) % 3 != 0:
            raise ValueError(f"Coding sequence length {len(self.sequence)} is not a multiple of 3")
        if self.stop_offset - self.start_offset != len(self.sequence):
            raise ValueError(f"Invalid coding sequence coordinates: {self.start_offset}-{self.stop_offset}")

    @property
    def codon_count(self) -> int:
        return len(self.sequence) // 3


@dataclass(frozen=True)
class CodonEntry:
    """One row of the codon-property table."""
    codon: str
    amino_acid: str
    mass: Optional[float] = None
    charge: Optional[int] = None

    @property
    def is_stop(self) -> bool:
        return self.amino_acid == "STOP"


class CodonTable:
    """Read-only mapping from RNA codon to its table entry."""

    def __init__(self, entries: Iterable[CodonEntry] = ()):
        table: Dict[str, CodonEntry] = {}
        for entry in entries:
            table.setdefault(entry.codon, entry)
        self._entries: Mapping[str, CodonEntry] = MappingProxyType(table)

    @property
    def entries(self) -> Mapping[str, CodonEntry]:
        return self._entries

    def lookup(self, codon: str) -> Optional[CodonEntry]:
        """Return the entry for a codon, or None when the table has no such row."""
        return self._entries.get(codon)

    def __contains__(self, codon: object) -> bool:
        return codon in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"CodonTable({len(self)} codons)"

    def __reduce__(self):
        # MappingProxyType is not picklable; rebuild from the entries
        return (CodonTable, (tuple(self._entries.values()),))


@dataclass(frozen=True)
class ProteinRecord:
    """A translated coding sequence with its aggregate mass and charge."""
    amino_acids: str
    total_mass: float
    total_charge: int
    coding_sequence: str = ""

    @property
    def residue_count(self) -> int:
        """Number of codons translated into this record."""
        return len(self.coding_sequence) // 3

    def format_line(self, mass_unit: str = "u", charge_unit: str = "e") -> str:
        """Render as '<labels> <mass><unit> <charge><unit>' with mass to 4 decimal places."""
        return f"{self.amino_acids} {self.total_mass:.4f}{mass_unit} {self.total_charge}{charge_unit}"


@dataclass
class TranscriptResult:
    """Outcome of running the splice, scan and translate stages on one transcript."""
    transcript: Transcript
    variant_count: int = 0
    orf_count: int = 0
    proteins: List[ProteinRecord] = field(default_factory=list)

    @property
    def protein_count(self) -> int:
        return len(self.proteins)


@dataclass
class ExpressionResult:
    """Outcome of one pipeline invocation over a single input sequence."""
    sequence_id: str
    sequence_length: int = 0
    promoter_count: int = 0
    terminator_count: int = 0
    transcripts: List[TranscriptResult] = field(default_factory=list)
    skipped: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def proteins(self) -> List[ProteinRecord]:
        """All protein records in emission order."""
        return [protein for result in self.transcripts for protein in result.proteins]

    @property
    def protein_count(self) -> int:
        return sum(result.protein_count for result in self.transcripts)
