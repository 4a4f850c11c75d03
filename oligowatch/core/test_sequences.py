# core/test_sequences.py
"""
Tests for DNA sequence validation and FASTA parsing.
"""

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import SimpleTestCase

from core.exceptions import FastaFormatError, SequenceValidationError
from core.sequences import (
    EMPTY_SEQUENCE_MESSAGE,
    INVALID_SEQUENCE_MESSAGE,
    FastaRecord,
    clean_sequence,
    is_valid_dna_sequence,
    parse_fasta,
    parse_single_fasta,
    read_uploaded_fasta,
    validate_dna_sequence,
)


class SequenceValidationTest(SimpleTestCase):

    def test_lowercase_is_uppercased(self):
        self.assertEqual(validate_dna_sequence('acgt'), 'ACGT')

    def test_whitespace_is_removed(self):
        self.assertEqual(validate_dna_sequence('AC GT'), 'ACGT')
        self.assertEqual(clean_sequence(' ac\tg\r\nt '), 'ACGT')

    def test_iupac_ambiguity_codes_are_accepted(self):
        self.assertEqual(validate_dna_sequence('ryswkmbdhvn'), 'RYSWKMBDHVN')

    def test_invalid_character_is_rejected(self):
        with self.assertRaises(SequenceValidationError) as ctx:
            validate_dna_sequence('ACGX')
        self.assertEqual(ctx.exception.message, INVALID_SEQUENCE_MESSAGE)

    def test_inosine_and_uracil_are_rejected(self):
        self.assertFalse(is_valid_dna_sequence('ACGI'))
        self.assertFalse(is_valid_dna_sequence('ACGU'))

    def test_empty_sequence_is_rejected(self):
        with self.assertRaises(SequenceValidationError) as ctx:
            validate_dna_sequence('  \n ')
        self.assertEqual(ctx.exception.message, EMPTY_SEQUENCE_MESSAGE)

    def test_is_valid(self):
        self.assertTrue(is_valid_dna_sequence('acgtn'))
        self.assertFalse(is_valid_dna_sequence('AC-GT'))


class FastaParsingTest(SimpleTestCase):

    def test_two_records(self):
        self.assertEqual(
            parse_fasta('>s1\nACGT\n>s2\nTTTT'),
            [FastaRecord('s1', 'ACGT'), FastaRecord('s2', 'TTTT')],
        )

    def test_multiline_body_and_crlf(self):
        records = parse_fasta('>probe_1 some description\r\nACGT\r\n  TTGG \r\n\r\n')
        self.assertEqual(records, [FastaRecord('probe_1', 'ACGTTTGG')])

    def test_trailing_header_without_sequence_is_dropped(self):
        self.assertEqual(parse_fasta('>s1\nACGT\n>s2\n'), [FastaRecord('s1', 'ACGT')])

    def test_header_without_sequence_between_records_is_dropped(self):
        records = parse_fasta('>a\n>b\nCCCC')
        self.assertEqual(records, [FastaRecord('b', 'CCCC')])

    def test_empty_header_gets_positional_name(self):
        records = parse_fasta('>\nACGT\n> \nGGGG')
        self.assertEqual([r.name for r in records], ['sequence_1', 'sequence_2'])

    def test_lines_before_first_header_are_ignored(self):
        self.assertEqual(parse_fasta('junk\n>s1\nAC'), [FastaRecord('s1', 'AC')])

    def test_empty_input(self):
        self.assertEqual(parse_fasta(''), [])

    def test_single_record(self):
        self.assertEqual(parse_single_fasta('>amp\nACGT\nACGT'), FastaRecord('amp', 'ACGTACGT'))

    def test_single_refuses_two_records(self):
        with self.assertRaises(FastaFormatError) as ctx:
            parse_single_fasta('>s1\nACGT\n>s2\nTTTT')
        self.assertEqual(
            ctx.exception.message,
            'FASTA file must contain exactly one sequence (found 2)',
        )

    def test_single_refuses_no_record(self):
        with self.assertRaises(FastaFormatError) as ctx:
            parse_single_fasta('>only_header\n')
        self.assertEqual(ctx.exception.message, 'No sequence found in FASTA input')


class UploadedFastaTest(SimpleTestCase):

    def test_utf8_with_bom(self):
        upload = SimpleUploadedFile('a.fasta', '\ufeff>s1\nACGT\n'.encode('utf-8'))
        self.assertEqual(read_uploaded_fasta(upload), '>s1\nACGT\n')

    def test_binary_file_is_refused(self):
        upload = SimpleUploadedFile('a.fasta', b'\xff\xfe\x00\x81')
        with self.assertRaises(FastaFormatError):
            read_uploaded_fasta(upload)

    def test_size_limit(self):
        upload = SimpleUploadedFile('a.fasta', b'>s1\n' + b'A' * 100)
        with self.assertRaises(FastaFormatError):
            read_uploaded_fasta(upload, max_bytes=10)
