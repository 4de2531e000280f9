#!/usr/bin/env python3

"""
Command-line interface for the gene expression pipeline.

Reads a nucleotide sequence file, runs every pipeline stage and prints or
writes one line per unique translated protein.
"""

import argparse
import sys
import os
import logging

from gene_expression_pipeline.core.config import load_config
from gene_expression_pipeline.core.exceptions import PipelineError

DEFAULT_INPUT = "input.txt"


def setup_logging(log_level: str = "INFO") -> None:
    """Set up logging configuration."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def create_argument_parser() -> argparse.ArgumentParser:
    """Create command line argument parser."""
    parser = argparse.ArgumentParser(
        description="Simulated gene expression: promoters, splicing, ORFs and translation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Print proteins for the default input.txt
  python pipeline_cli.py

  # FASTA input, custom codon table, results written to a directory
  python pipeline_cli.py genes.fa --codon-table translation_table.txt --output-dir results
        """
    )

    parser.add_argument(
        'input',
        nargs='?',
        default=DEFAULT_INPUT,
        help=f'Input sequence file, plain text or FASTA (default: {DEFAULT_INPUT})'
    )
    parser.add_argument(
        '--codon-table',
        help='Codon-property table (default: bundled standard table)'
    )
    parser.add_argument(
        '--output-dir',
        help='Output directory; proteins are printed to stdout when omitted'
    )
    parser.add_argument(
        '--config',
        help='Configuration file (JSON or YAML)'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default='WARNING',
        help='Logging level (default: WARNING)'
    )

    # Processing options
    parser.add_argument(
        '--per-promoter',
        action='store_true',
        help='Deduplicate proteins across all transcripts of a promoter'
    )
    parser.add_argument(
        '--strict-alphabet',
        action='store_true',
        help='Skip transcripts containing symbols other than A/C/G/U'
    )
    parser.add_argument(
        '--headers',
        action='store_true',
        help='Precede each transcript\'s proteins with a "# <sequence> <transcript> [start:end]" line'
    )

    # Advanced options
    parser.add_argument(
        '--memory-limit',
        type=int,
        help='Memory limit in MB (default: 4096)'
    )
    parser.add_argument(
        '--batch-size',
        type=int,
        help='Splice variants between memory checks (default: 256)'
    )
    parser.add_argument(
        '--workers',
        type=int,
        help='Worker processes for multi-record input (default: 1)'
    )

    return parser


def apply_overrides(config, args) -> None:
    """Override config with command line arguments."""
    if args.codon_table is not None:
        config.codon_table_path = args.codon_table
    if args.memory_limit is not None:
        config.memory_limit_mb = args.memory_limit
    if args.batch_size is not None:
        config.batch_size = args.batch_size
    if args.workers is not None:
        config.parallel_workers = args.workers
    if args.per_promoter:
        config.deduplicate_per_promoter = True
    if args.strict_alphabet:
        config.strict_alphabet = True
    if args.headers:
        config.include_headers = True
    if args.log_level == 'DEBUG':
        config.debug_mode = True


def main(argv=None):
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    try:
        if not os.path.exists(args.input):
            raise FileNotFoundError(f"No such file: {args.input}")

        config = load_config(config_path=args.config, use_env=True)
        apply_overrides(config, args)

        # Re-validate after CLI overrides.
        config.validate()

        from gene_expression_pipeline import GeneExpressionPipeline

        pipeline = GeneExpressionPipeline(config)
        success = pipeline.run(input_file=args.input, output_dir=args.output_dir)

        if not success:
            logger.error("Pipeline failed!")
            return 1

        if not args.output_dir:
            for result in pipeline.results:
                for line in pipeline.generator.format_result(result):
                    print(line)

        return 0

    except FileNotFoundError as e:
        logger.error(f"File error: {e}")
        return 1
    except PipelineError as e:
        logger.error(f"Pipeline error: {e}")
        return 1
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        logger.debug("Full traceback:", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
