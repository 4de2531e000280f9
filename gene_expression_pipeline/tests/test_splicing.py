#!/usr/bin/env python3

"""
Unit tests for intron detection and splice-variant enumeration.

Enumeration is exhaustive: a transcript with n exon fragments always
yields 2**n variants, empty and fully spliced forms included.
"""

import random
import unittest
from unittest.mock import Mock
import sys
import os

# Add the parent directory to the path to import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from gene_expression_pipeline.core.data_structures import Match, Transcript
from gene_expression_pipeline.core.exceptions import MemoryError as PipelineMemoryError
from gene_expression_pipeline.core.exceptions import SequenceError
from gene_expression_pipeline.core.processors import SpliceVariantEnumerator, TranscriptValidator


def make_transcript(sequence: str) -> Transcript:
    return Transcript(
        promoter=Match("TATAAA", 0),
        terminator=Match("CGCGCGCGAAACGCGCGCGTTTTTTT", 10),
        start_index=6,
        end_index=36,
        sequence=sequence
    )


class TestIntronDetection(unittest.TestCase):
    """Test intron boundary detection and fragment splitting."""

    def setUp(self):
        """Set up test fixtures."""
        self.enumerator = SpliceVariantEnumerator()

    def test_empty_intron_body(self):
        """Test donor immediately followed by acceptor is one intron."""
        introns = self.enumerator.find_introns("AUGGUAAGUCAGUUUUGA")
        self.assertEqual(introns, [Match("GUAAGUCAG", 3)])

        fragments = self.enumerator.split_fragments("AUGGUAAGUCAGUUUUGA")
        self.assertEqual([f.sequence for f in fragments], ["AUG", "UUUUGA"])
        self.assertEqual([f.index for f in fragments], [0, 1])

    def test_shortest_span(self):
        """Test the intron ends at the nearest acceptor."""
        introns = self.enumerator.find_introns("AAGUGAGUCCCAGUUCAGAA")
        self.assertEqual(introns, [Match("GUGAGUCCCAG", 2)])

        fragments = self.enumerator.split_fragments("AAGUGAGUCCCAGUUCAGAA")
        self.assertEqual([f.sequence for f in fragments], ["AA", "UUCAGAA"])

    def test_donor_without_acceptor(self):
        """Test an unterminated donor is not an intron."""
        self.assertEqual(self.enumerator.find_introns("GUAAGUAAAA"), [])
        self.assertEqual(len(self.enumerator.split_fragments("GUAAGUAAAA")), 1)

    def test_two_introns(self):
        """Test fragments between and around two introns."""
        sequence = "A" + "GUAAGUCAG" + "C" + "GUGAGUACAG" + "U"
        fragments = self.enumerator.split_fragments(sequence)
        self.assertEqual([f.sequence for f in fragments], ["A", "C", "U"])

    def test_fragments_and_introns_tile_sequence(self):
        """Test fragments interleaved with detected introns rebuild the transcript."""
        rng = random.Random(7)
        pieces = ["GUAAGU", "GUGAGU", "CAG", "AUG", "A", "C", "G", "U"]
        for _ in range(100):
            sequence = ''.join(rng.choice(pieces) for _ in range(rng.randint(0, 20)))
            introns = self.enumerator.find_introns(sequence)
            fragments = self.enumerator.split_fragments(sequence)

            self.assertEqual(len(fragments), len(introns) + 1)
            rebuilt = fragments[0].sequence + ''.join(
                intron.text + fragment.sequence for intron, fragment in zip(introns, fragments[1:])
            )
            self.assertEqual(rebuilt, sequence)

    def test_edge_introns_leave_empty_fragments(self):
        """Test introns at the transcript edges produce empty edge fragments."""
        fragments = self.enumerator.split_fragments("GUAAGUCAG")
        self.assertEqual([f.sequence for f in fragments], ["", ""])


class TestSpliceVariantEnumeration(unittest.TestCase):
    """Test power-set enumeration of exon fragments."""

    def setUp(self):
        """Set up test fixtures."""
        self.enumerator = SpliceVariantEnumerator()

    def test_no_introns(self):
        """Test a single fragment gives the empty and full variants."""
        variants = self.enumerator.enumerate_variants(make_transcript("AUGUUUUGA"))
        self.assertEqual([v.sequence for v in variants], ["", "AUGUUUUGA"])

    def test_single_intron_gives_four_variants(self):
        """Test one empty-bodied intron yields n=2 fragments and 4 variants."""
        variants = self.enumerator.enumerate_variants(make_transcript("AUGGUAAGUCAGUUUUGA"))

        self.assertEqual(len(variants), 4)
        self.assertEqual([v.sequence for v in variants], ["", "AUG", "UUUUGA", "AUGUUUUGA"])
        self.assertEqual([v.mask for v in variants], [0, 1, 2, 3])
        self.assertTrue(all(v.fragment_count == 2 for v in variants))

    def test_mask_selects_fragments_in_order(self):
        """Test bit i selects fragment i and fragments stay in order."""
        sequence = "A" + "GUAAGUCAG" + "C" + "GUGAGUACAG" + "U"
        variants = self.enumerator.enumerate_variants(sequence)

        self.assertEqual(len(variants), 8)
        self.assertEqual(variants[5].sequence, "AU")
        self.assertEqual(variants[5].included_fragments, [0, 2])
        self.assertEqual(variants[6].sequence, "CU")
        self.assertEqual(variants[7].sequence, "ACU")

    def test_variant_count_is_power_of_two(self):
        """Test 2**n variants for n fragments, including empty and full forms."""
        for intron_count in range(6):
            sequence = "A" + ("GUAAGUCAG" + "C") * intron_count
            fragments = self.enumerator.split_fragments(sequence)
            variants = self.enumerator.enumerate_variants(sequence)

            self.assertEqual(len(fragments), intron_count + 1)
            self.assertEqual(len(variants), 2 ** len(fragments))
            self.assertEqual(variants[0].sequence, "")
            self.assertEqual(variants[-1].sequence, "A" + "C" * intron_count)

    def test_duplicates_are_kept(self):
        """Test identical variant text is not deduplicated."""
        sequence = "AUG" + "GUAAGUCAG" + "AUG"
        variants = self.enumerator.enumerate_variants(sequence)
        self.assertEqual([v.sequence for v in variants], ["", "AUG", "AUG", "AUGAUG"])

    def test_memory_checked_every_batch(self):
        """Test the monitor is consulted every batch_size variants."""
        monitor = Mock()
        enumerator = SpliceVariantEnumerator(monitor=monitor, batch_size=2)

        enumerator.enumerate_variants("AUGGUAAGUCAGUUUUGA")

        self.assertEqual(monitor.check_memory_limit.call_count, 2)

    def test_memory_limit_aborts_enumeration(self):
        """Test exceeding the memory limit raises instead of truncating."""
        monitor = Mock()
        monitor.check_memory_limit.side_effect = PipelineMemoryError("Memory usage exceeded limit", 200.0, 100.0)
        enumerator = SpliceVariantEnumerator(monitor=monitor, batch_size=1)

        with self.assertRaises(PipelineMemoryError):
            enumerator.enumerate_variants("AUGGUAAGUCAGUUUUGA")


class TestTranscriptValidator(unittest.TestCase):
    """Test strict alphabet checking."""

    def test_lenient_by_default(self):
        """Test unknown symbols pass when strict checking is off."""
        TranscriptValidator().validate(make_transcript("AUGNNN"))

    def test_strict_rejects_unknown_symbols(self):
        """Test strict checking raises SequenceError naming the transcript."""
        validator = TranscriptValidator(strict_alphabet=True)

        with self.assertRaises(SequenceError) as ctx:
            validator.validate(make_transcript("AUGNNX"))
        self.assertEqual(ctx.exception.sequence_id, "P0-T10")
        self.assertIn("NX", str(ctx.exception))

    def test_strict_accepts_rna(self):
        """Test a clean RNA transcript passes strict checking."""
        TranscriptValidator(strict_alphabet=True).validate(make_transcript("ACGU"))


if __name__ == '__main__':
    unittest.main()
