#!/usr/bin/env python3

"""
Output generation for translated protein records.
"""

import csv
import logging
from pathlib import Path
from typing import Iterator, List

from .data_structures import ExpressionResult, ProteinRecord, TranscriptResult
from .exceptions import PipelineError

TSV_COLUMNS = [
    'sequence_id', 'transcript_id', 'start_index', 'end_index',
    'amino_acids', 'mass', 'charge', 'coding_sequence'
]


class OutputGenerator:
    """Render expression results as protein lines and tabular files."""

    def __init__(self, mass_unit: str = "u", charge_unit: str = "e",
                 include_headers: bool = False, write_tsv: bool = True):
        self.mass_unit = mass_unit
        self.charge_unit = charge_unit
        self.include_headers = include_headers
        self.write_tsv = write_tsv

    def format_protein(self, protein: ProteinRecord) -> str:
        return protein.format_line(self.mass_unit, self.charge_unit)

    def format_header(self, sequence_id: str, result: TranscriptResult) -> str:
        transcript = result.transcript
        return f"# {sequence_id} {transcript.id} [{transcript.start_index}:{transcript.end_index}]"

    def format_result(self, result: ExpressionResult) -> Iterator[str]:
        """Protein lines for every transcript, each group optionally headed."""
        for transcript_result in result.transcripts:
            if self.include_headers:
                yield self.format_header(result.sequence_id, transcript_result)
            for protein in transcript_result.proteins:
                yield self.format_protein(protein)

    def generate_outputs(self, results: List[ExpressionResult], output_dir: str) -> List[str]:
        """Write proteins.txt (and proteins.tsv) and return the written paths."""
        output_path = Path(output_dir)
        output_files = []

        try:
            text_file = output_path / 'proteins.txt'
            with open(text_file, 'w') as f:
                for result in results:
                    for line in self.format_result(result):
                        f.write(line + '\n')
            output_files.append(str(text_file))

            if self.write_tsv:
                tsv_file = output_path / 'proteins.tsv'
                self._write_tsv(tsv_file, results)
                output_files.append(str(tsv_file))

        except OSError as e:
            raise PipelineError(f"Failed to write output files: {e}")

        logging.info(f"Wrote {sum(r.protein_count for r in results)} protein records")
        return output_files

    def _write_tsv(self, path: Path, results: List[ExpressionResult]) -> None:
        with open(path, 'w', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=TSV_COLUMNS, delimiter='\t')
            writer.writeheader()
            for result in results:
                for transcript_result in result.transcripts:
                    transcript = transcript_result.transcript
                    for protein in transcript_result.proteins:
                        writer.writerow({
                            'sequence_id': result.sequence_id,
                            'transcript_id': transcript.id,
                            'start_index': transcript.start_index,
                            'end_index': transcript.end_index,
                            'amino_acids': protein.amino_acids,
                            'mass': f"{protein.total_mass:.4f}",
                            'charge': protein.total_charge,
                            'coding_sequence': protein.coding_sequence,
                        })
