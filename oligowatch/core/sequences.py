# core/sequences.py
"""
DNA sequence checks and FASTA reading shared by the assay and oligo pages.
"""

import re
from collections import namedtuple
from typing import List

from .exceptions import FastaFormatError, SequenceValidationError

# A, C, G, T plus the IUPAC ambiguity codes
IUPAC_DNA_ALPHABET = frozenset('ACGTRYSWKMBDHVN')

INVALID_SEQUENCE_MESSAGE = (
    'Sequence contains invalid characters. Only A, C, G, T and IUPAC ambiguous '
    'codes (R, Y, S, W, K, M, B, D, H, V, N) are allowed.'
)
EMPTY_SEQUENCE_MESSAGE = 'DNA sequence is required'

_WHITESPACE = re.compile(r'\s+')

FastaRecord = namedtuple('FastaRecord', ['name', 'sequence'])


def clean_sequence(text: str) -> str:
    """Remove all whitespace and uppercase."""
    return _WHITESPACE.sub('', text or '').upper()


def validate_dna_sequence(text: str) -> str:
    """
    Validate a DNA sequence against the IUPAC nucleotide alphabet.

    Args:
        text: Raw sequence as typed or read from a file

    Returns:
        The cleaned sequence (no whitespace, uppercase)

    Raises:
        SequenceValidationError: empty, or a character outside the alphabet
    """
    cleaned = clean_sequence(text)
    if not cleaned:
        raise SequenceValidationError(EMPTY_SEQUENCE_MESSAGE)
    if not IUPAC_DNA_ALPHABET.issuperset(cleaned):
        raise SequenceValidationError(INVALID_SEQUENCE_MESSAGE)
    return cleaned


def is_valid_dna_sequence(text: str) -> bool:
    try:
        validate_dna_sequence(text)
    except SequenceValidationError:
        return False
    return True


def parse_fasta(text: str) -> List[FastaRecord]:
    """
    Parse multi-record FASTA text into (name, sequence) records.

    The name is the first whitespace-delimited token of the header, or
    'sequence_<n>' for the n-th header when that is empty. Body lines are
    stripped and concatenated until the next header. Headers without any
    body line are dropped, as are lines before the first header.
    Sequences are returned as written; validation is up to the caller.
    """
    records = []
    name = None
    chunks = []
    header_count = 0

    def flush():
        if name is not None and chunks:
            records.append(FastaRecord(name, ''.join(chunks)))

    for raw_line in (text or '').splitlines():
        line = raw_line.strip()
        if line.startswith('>'):
            flush()
            header_count += 1
            tokens = line[1:].split()
            name = tokens[0] if tokens else f'sequence_{header_count}'
            chunks = []
        elif line and name is not None:
            chunks.append(line)

    flush()
    return records


def parse_single_fasta(text: str) -> FastaRecord:
    """
    Parse FASTA text that must hold exactly one record.

    Raises:
        FastaFormatError: zero or more than one record
    """
    records = parse_fasta(text)
    if not records:
        raise FastaFormatError('No sequence found in FASTA input')
    if len(records) > 1:
        raise FastaFormatError(
            f'FASTA file must contain exactly one sequence (found {len(records)})'
        )
    return records[0]


def read_uploaded_fasta(uploaded_file, max_bytes: int = None) -> str:
    """
    Read an uploaded FASTA file as text.

    Args:
        uploaded_file: Django UploadedFile
        max_bytes: Refuse files larger than this many bytes

    Raises:
        FastaFormatError: too large or not UTF-8 text
    """
    if max_bytes is not None and uploaded_file.size > max_bytes:
        raise FastaFormatError(
            f'FASTA file is too large ({uploaded_file.size} bytes, limit {max_bytes})'
        )
    data = uploaded_file.read()
    try:
        return data.decode('utf-8-sig')
    except UnicodeDecodeError:
        raise FastaFormatError('FASTA file is not a readable text file')
