#!/usr/bin/env python3

"""
Main pipeline class for simulated gene expression.

Runs normalization, signal detection, transcript extraction, splicing,
ORF scanning and translation over every input sequence.
"""

import time
import logging
from concurrent.futures import ProcessPoolExecutor
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

from .config import PipelineConfig
from .data_structures import CodonTable, ExpressionResult, Transcript, TranscriptResult
from .exceptions import PipelineError, SequenceError
from ..utils.performance_monitor import PerformanceMonitor

from .parsers import CodonTableParser, SequenceReader
from .processors import (
    CodonTranslator, ORFScanner, SequenceNormalizer, SignalLocator,
    SpliceVariantEnumerator, TranscriptExtractor, TranscriptValidator
)
from .generators import OutputGenerator


def _express_record(config: PipelineConfig, codon_table: CodonTable,
                    sequence_id: str, raw_text: str) -> ExpressionResult:
    """Worker entry point for process-pool execution."""
    return GeneExpressionPipeline(config, codon_table).express(raw_text, sequence_id)


class GeneExpressionPipeline:
    """Main pipeline class that coordinates all processing phases."""

    def __init__(self, config: Optional[PipelineConfig] = None,
                 codon_table: Optional[CodonTable] = None):
        self.config = config or PipelineConfig()
        self.monitor = PerformanceMonitor(
            memory_limit_mb=self.config.memory_limit_mb,
            enabled=self.config.enable_memory_monitoring
        )

        # The table is loaded once and shared read-only by every invocation
        if codon_table is None:
            codon_table = CodonTableParser(self.config.codon_table_path).parse()
        self.codon_table = codon_table

        self.normalizer = SequenceNormalizer()
        self.locator = SignalLocator()
        self.extractor = TranscriptExtractor()
        self.validator = TranscriptValidator(self.config.strict_alphabet)
        self.enumerator = SpliceVariantEnumerator(self.monitor, self.config.batch_size)
        self.scanner = ORFScanner()
        self.translator = CodonTranslator(self.codon_table)
        self.generator = OutputGenerator(
            self.config.mass_unit,
            self.config.charge_unit,
            self.config.include_headers,
            self.config.write_tsv
        )

        self.records: List[Tuple[str, str]] = []
        self.results: List[ExpressionResult] = []

    def express(self, raw_text: str, sequence_id: str = "sequence") -> ExpressionResult:
        """Run every stage over one raw input sequence."""
        sequence = self.normalizer.normalize(raw_text)
        promoters = self.locator.find_promoters(sequence)
        terminators = self.locator.find_terminators(sequence)

        logging.info(f"{sequence_id}: {len(sequence)} nt, {len(promoters)} promoters, "
                     f"{len(terminators)} terminators")

        result = ExpressionResult(
            sequence_id=sequence_id,
            sequence_length=len(sequence),
            promoter_count=len(promoters),
            terminator_count=len(terminators)
        )

        emitted: Dict[int, Set[str]] = {}
        for transcript in self.extractor.extract(sequence, promoters, terminators):
            try:
                transcript_result = self.process_transcript(transcript)
            except SequenceError as e:
                logging.warning(f"Skipping transcript {transcript.id} of {sequence_id}: {e}")
                result.skipped.append((transcript.id, str(e)))
                continue

            if self.config.deduplicate_per_promoter:
                seen = emitted.setdefault(transcript.promoter.start, set())
                transcript_result.proteins = [
                    p for p in transcript_result.proteins if p.coding_sequence not in seen
                ]
                seen.update(p.coding_sequence for p in transcript_result.proteins)

            result.transcripts.append(transcript_result)

        logging.info(f"{sequence_id}: {len(result.transcripts)} transcripts, "
                     f"{result.protein_count} proteins, {len(result.skipped)} skipped")
        return result

    def process_transcript(self, transcript: Transcript) -> TranscriptResult:
        """Splice, scan and translate a single transcript."""
        self.validator.validate(transcript)

        start_time = time.time()
        variants = self.enumerator.enumerate_variants(transcript)
        self.monitor.validate_complexity(
            variants[0].fragment_count, time.time() - start_time, "O(2^n)"
        )

        coding_sequences = [cds for variant in variants for cds in self.scanner.scan(variant)]
        proteins = self.translator.translate(coding_sequences)

        logging.debug(f"Transcript {transcript.id}: {len(variants)} variants, "
                      f"{len(coding_sequences)} ORFs, {len(proteins)} unique proteins")

        return TranscriptResult(
            transcript=transcript,
            variant_count=len(variants),
            orf_count=len(coding_sequences),
            proteins=proteins
        )

    def express_records(self, records: List[Tuple[str, str]]) -> List[ExpressionResult]:
        """Run every record, in a process pool when more than one worker is configured."""
        workers = self.config.parallel_workers
        if workers > 1 and len(records) > 1:
            logging.info(f"Processing {len(records)} sequences with {workers} workers")
            with ProcessPoolExecutor(max_workers=workers) as executor:
                futures = [
                    executor.submit(_express_record, self.config, self.codon_table, seq_id, raw)
                    for seq_id, raw in records
                ]
                return [future.result() for future in futures]

        return [self.express(raw, seq_id) for seq_id, raw in records]

    def run(self, input_file: str, output_dir: Optional[str] = None) -> bool:
        """
        Run the complete expression pipeline over an input file.

        Args:
            input_file: Path to plain-text or FASTA sequence input
            output_dir: Output directory path (optional; results are kept in
                ``self.results`` either way)

        Returns:
            True if pipeline completed successfully
        """
        file_handler = None
        try:
            if output_dir:
                Path(output_dir).mkdir(parents=True, exist_ok=True)
                file_handler = self._setup_pipeline_logging(output_dir)

            logging.info("Starting Gene Expression Pipeline")
            logging.info(f"Configuration: {self.config}")
            logging.info(f"Input file: {input_file}")

            self._parse_inputs(input_file)
            self._express_sequences()

            if output_dir:
                self._generate_outputs(output_dir)
                if self.config.generate_reports:
                    self._generate_final_report(output_dir)

            logging.info("Pipeline completed successfully")
            self.monitor.log_performance_report()
            return True

        except Exception as e:
            logging.error(f"Pipeline failed: {e}")
            logging.debug("Full traceback:", exc_info=True)
            return False

        finally:
            if file_handler is not None:
                logging.getLogger().removeHandler(file_handler)
                file_handler.close()

    def _setup_pipeline_logging(self, output_dir: str) -> logging.Handler:
        """Set up pipeline-specific logging."""
        log_file = Path(output_dir) / 'gene_expression.log'

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(levelname)s - %(message)s'
        ))

        root_logger = logging.getLogger()
        root_logger.addHandler(file_handler)

        if self.config.debug_mode:
            root_logger.setLevel(logging.DEBUG)

        return file_handler

    def _parse_inputs(self, input_file: str) -> None:
        """Read all input sequences."""
        with self.monitor.phase_context("input_parsing") as metrics:
            self.records = SequenceReader(input_file).read()
            metrics.operations_count = len(self.records)

    def _express_sequences(self) -> None:
        """Run the expression stages over every input sequence."""
        with self.monitor.phase_context("expression") as metrics:
            self.results = self.express_records(self.records)
            metrics.operations_count = sum(len(r.transcripts) for r in self.results)

    def _generate_outputs(self, output_dir: str) -> None:
        """Generate output files."""
        with self.monitor.phase_context("output_generation") as metrics:
            output_files = self.generator.generate_outputs(self.results, output_dir)
            metrics.operations_count = len(output_files)

            for file_path in output_files:
                logging.info(f"Created: {file_path}")

    def _generate_final_report(self, output_dir: str) -> None:
        """Generate processing report."""
        report_file = Path(output_dir) / 'processing_report.txt'

        total_transcripts = sum(len(r.transcripts) for r in self.results)
        total_skipped = sum(len(r.skipped) for r in self.results)
        total_variants = sum(t.variant_count for r in self.results for t in r.transcripts)
        total_orfs = sum(t.orf_count for r in self.results for t in r.transcripts)
        total_proteins = sum(r.protein_count for r in self.results)

        performance = self.monitor.get_performance_summary()

        try:
            with open(report_file, 'w') as f:
                f.write("Gene Expression Pipeline - Processing Report\n")
                f.write("=" * 50 + "\n\n")

                f.write("INPUT STATISTICS\n")
                f.write("-" * 20 + "\n")
                f.write(f"Sequences: {len(self.results):,}\n")
                f.write(f"Total length: {sum(r.sequence_length for r in self.results):,} nt\n")
                f.write(f"Promoters: {sum(r.promoter_count for r in self.results):,}\n")
                f.write(f"Terminators: {sum(r.terminator_count for r in self.results):,}\n\n")

                f.write("PROCESSING RESULTS\n")
                f.write("-" * 20 + "\n")
                f.write(f"Transcripts processed: {total_transcripts:,}\n")
                f.write(f"Transcripts skipped: {total_skipped:,}\n")
                f.write(f"Splice variants: {total_variants:,}\n")
                f.write(f"Open reading frames: {total_orfs:,}\n")
                f.write(f"Unique proteins: {total_proteins:,}\n\n")

                f.write("PERFORMANCE METRICS\n")
                f.write("-" * 20 + "\n")
                f.write(f"Total processing time: {performance['total_elapsed_time']:.2f} seconds\n")
                f.write(f"Peak memory usage: {performance['peak_memory_mb']:.1f} MB\n\n")

                if performance['phases']:
                    f.write("PHASE BREAKDOWN\n")
                    f.write("-" * 20 + "\n")
                    for phase_name, phase_data in performance['phases'].items():
                        f.write(f"{phase_name}: {phase_data['elapsed_time']:.2f}s ")
                        f.write(f"({phase_data['operations_count']} operations)\n")

                f.write("\nConfiguration used:\n")
                for key, value in self.config.to_dict().items():
                    f.write(f"  {key}: {value}\n")

        except OSError as e:
            raise PipelineError(f"Failed to write processing report: {e}")

        logging.info(f"Generated processing report: {report_file}")
