#!/usr/bin/env python3

"""
Test suite for the gene expression pipeline.

Unit tests covering:
- Core data structures and their invariants
- Configuration management and validation
- Codon table and sequence input parsing
- Each processing stage (signals, transcripts, splicing, ORFs, translation)
- Output generation and end-to-end pipeline scenarios
- Performance monitoring
"""
