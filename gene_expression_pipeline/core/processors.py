#!/usr/bin/env python3

"""
Processing stages of the expression pipeline.

Normalization, promoter/terminator detection, transcript extraction,
splice-variant enumeration, open reading frame scanning and codon translation.
"""

import logging
import re
from typing import List, Optional, Pattern, Union

from .data_structures import (
    CodingSequence, CodonEntry, CodonTable, ExonFragment, Match,
    ProteinRecord, SpliceVariant, Transcript
)
from .exceptions import SequenceError

NUCLEOTIDES = frozenset("ATGCU")
RNA_ALPHABET = frozenset("ACGU")

PROMOTER_PATTERN = re.compile(r"(TA){2}A{2}|[CT]{2}A[ATGC][AT][CT]{2}", re.IGNORECASE)
TERMINATOR_PATTERN = re.compile(r"(CG){4}A{3}(CG){4}T{7}", re.IGNORECASE)
INTRON_PATTERN = re.compile(r"GU[AG]AGU.*?CAG", re.IGNORECASE | re.DOTALL)

TERMINATOR_LENGTH = 26
TATA_PROMOTER_SKIP = 6
CONSENSUS_PROMOTER_SKIP = 2

START_CODON = "AUG"
STOP_CODONS = frozenset({"UGA", "UAA", "UAG"})


class SequenceNormalizer:
    """Canonicalize raw input text into an uppercase nucleotide stream."""

    STRIPPED = str.maketrans('', '', '\r\n ')

    def normalize(self, raw_text: str) -> str:
        """
        Uppercase, drop CR/LF/space, then drop any leading non-nucleotide run.

        normalize(normalize(x)) == normalize(x) for every x.
        """
        sequence = raw_text.upper().translate(self.STRIPPED)
        start = 0
        while start < len(sequence) and sequence[start] not in NUCLEOTIDES:
            start += 1
        if start:
            logging.debug(f"Dropped {start} leading non-nucleotide character(s)")
        return sequence[start:]


class SignalLocator:
    """Locate promoter and terminator signals."""

    @staticmethod
    def find_all(sequence: str, pattern: Union[str, Pattern]) -> List[Match]:
        """All non-overlapping occurrences of pattern, in ascending offset order."""
        if isinstance(pattern, str):
            pattern = re.compile(pattern, re.IGNORECASE)
        return [Match(text=m.group(0), start=m.start()) for m in pattern.finditer(sequence)]

    def find_promoters(self, sequence: str) -> List[Match]:
        return self.find_all(sequence, PROMOTER_PATTERN)

    def find_terminators(self, sequence: str) -> List[Match]:
        return self.find_all(sequence, TERMINATOR_PATTERN)


class TranscriptExtractor:
    """Carve RNA transcripts out of the sequence for each promoter/terminator pair."""

    @staticmethod
    def promoter_skip(promoter: Match) -> int:
        """Offset past the promoter motif, chosen from its second symbol."""
        if len(promoter.text) > 1 and promoter.text[1].upper() == 'A':
            return TATA_PROMOTER_SKIP
        return CONSENSUS_PROMOTER_SKIP

    @staticmethod
    def transcribe(dna: str) -> str:
        """DNA to RNA: every T becomes U."""
        return dna.replace('T', 'U')

    def extract(self, sequence: str, promoters: List[Match],
                terminators: List[Match]) -> List[Transcript]:
        """One transcript per (promoter, terminator not upstream of it) pair."""
        transcripts = []
        for promoter in promoters:
            start_index = promoter.start + self.promoter_skip(promoter)
            for terminator in terminators:
                if terminator.start < promoter.start:
                    continue
                end_index = terminator.start + TERMINATOR_LENGTH
                transcripts.append(Transcript(
                    promoter=promoter,
                    terminator=terminator,
                    start_index=start_index,
                    end_index=end_index,
                    sequence=self.transcribe(sequence[start_index:end_index])
                ))

        logging.debug(f"Extracted {len(transcripts)} transcripts from "
                      f"{len(promoters)} promoters and {len(terminators)} terminators")
        return transcripts


class TranscriptValidator:
    """Reject transcripts containing symbols outside the RNA alphabet."""

    def __init__(self, strict_alphabet: bool = False):
        self.strict_alphabet = strict_alphabet

    def validate(self, transcript: Transcript) -> None:
        if not self.strict_alphabet:
            return

        invalid = sorted(set(transcript.sequence) - RNA_ALPHABET)
        if invalid:
            raise SequenceError(
                f"Unexpected symbols {''.join(invalid)!r}",
                sequence_id=transcript.id,
                sequence_type="transcript"
            )


class SpliceVariantEnumerator:
    """
    Enumerate every inclusion/exclusion combination of exon fragments.

    A transcript with n fragments yields exactly 2**n variants. The cost is
    exponential in intron count and is never capped; when a performance
    monitor is attached, memory is checked every ``batch_size`` variants and
    exceeding the limit raises MemoryError instead of truncating the set.
    """

    def __init__(self, monitor=None, batch_size: int = 256):
        self.monitor = monitor
        self.batch_size = batch_size

    @staticmethod
    def find_introns(sequence: str) -> List[Match]:
        """Non-overlapping donor...acceptor spans, shortest match first."""
        return SignalLocator.find_all(sequence, INTRON_PATTERN)

    def split_fragments(self, sequence: str) -> List[ExonFragment]:
        """Cut out every intron span; n fragments = introns + 1."""
        fragments = []
        position = 0
        for intron in self.find_introns(sequence):
            fragments.append(ExonFragment(index=len(fragments), sequence=sequence[position:intron.start]))
            position = intron.end
        fragments.append(ExonFragment(index=len(fragments), sequence=sequence[position:]))
        return fragments

    def enumerate_variants(self, transcript: Union[Transcript, str]) -> List[SpliceVariant]:
        sequence = transcript.sequence if isinstance(transcript, Transcript) else transcript
        fragments = self.split_fragments(sequence)
        n = len(fragments)

        variants = []
        for mask in range(1 << n):
            variants.append(SpliceVariant(
                mask=mask,
                fragment_count=n,
                sequence=''.join(f.sequence for f in fragments if (mask >> f.index) & 1)
            ))
            if self.monitor is not None and (mask + 1) % self.batch_size == 0:
                self.monitor.check_memory_limit()

        logging.debug(f"{n} exon fragments -> {len(variants)} splice variants")
        return variants


class ORFScanner:
    """Find coding sequences from each start codon to the first in-frame stop."""

    @staticmethod
    def find_start_codons(sequence: str) -> List[int]:
        """Offsets of every AUG, overlapping occurrences included."""
        offsets = []
        position = sequence.find(START_CODON)
        while position != -1:
            offsets.append(position)
            position = sequence.find(START_CODON, position + 1)
        return offsets

    def scan(self, variant: Union[SpliceVariant, str]) -> List[CodingSequence]:
        sequence = variant.sequence if isinstance(variant, SpliceVariant) else variant
        coding_sequences = []

        for start in self.find_start_codons(sequence):
            for j in range(start, len(sequence) - 2, 3):
                codon = sequence[j:j + 3]
                if codon in STOP_CODONS:
                    coding_sequences.append(CodingSequence(
                        sequence=sequence[start:j],
                        start_offset=start,
                        stop_offset=j,
                        stop_codon=codon
                    ))
                    break
            # No stop before the end: the partial frame is discarded

        return coding_sequences


class CodonTranslator:
    """Translate coding sequences into protein records using a codon table."""

    def __init__(self, codon_table: CodonTable):
        self.codon_table = codon_table

    def lookup(self, codon: str) -> Optional[CodonEntry]:
        return self.codon_table.lookup(codon)

    @staticmethod
    def split_codons(sequence: str) -> List[str]:
        if not sequence:
            return [""]
        return [sequence[i:i + 3] for i in range(0, len(sequence), 3)]

    def translate_one(self, sequence: str) -> ProteinRecord:
        """Translate a single coding sequence; unknown codons contribute nothing."""
        labels = []
        mass = 0.0
        charge = 0
        misses = 0

        for codon in self.split_codons(sequence):
            entry = self.lookup(codon)
            if entry is None:
                misses += 1
                continue
            labels.append(entry.amino_acid)
            if entry.mass is not None:
                mass += entry.mass
            if entry.charge is not None:
                charge += entry.charge

        if misses and sequence:
            logging.debug(f"{misses} codon(s) not found in table for {sequence}")

        return ProteinRecord(
            amino_acids=''.join(labels),
            total_mass=mass,
            total_charge=charge,
            coding_sequence=sequence
        )

    def translate(self, coding_sequences: List[Union[CodingSequence, str]]) -> List[ProteinRecord]:
        """Deduplicate by exact text, preserving first occurrence order, then translate."""
        unique = {}
        for cds in coding_sequences:
            text = cds.sequence if isinstance(cds, CodingSequence) else cds
            unique.setdefault(text, None)

        return [self.translate_one(text) for text in unique]
