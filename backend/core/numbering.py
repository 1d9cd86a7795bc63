"""
Sequential document numbers.

Job and invoice numbers share one shape: a fixed prefix that ends with the
two-digit year (``AAL-AI-25-``) followed by a zero-padded sequence. The next
sequence is the highest parsed sequence under the prefix plus one.
"""
import logging
import re

from django.db import IntegrityError, transaction
from django.utils import timezone

logger = logging.getLogger(__name__)

SEQUENCE_RE = re.compile(r'^[0-9]+$')

MAX_NUMBER_ATTEMPTS = 5


def year_suffix(today=None):
    """Last two digits of the year, e.g. '25'"""
    today = today or timezone.localdate()
    return f'{today.year % 100:02d}'


def parse_sequence(number, prefix):
    """Return the integer sequence after ``prefix`` or None when it is not numeric"""
    if not number or not number.startswith(prefix):
        return None
    suffix = number[len(prefix):]
    if not SEQUENCE_RE.match(suffix):
        return None
    return int(suffix)


def get_max_sequence(queryset, field, prefix):
    """Get the maximum sequence already used for a given prefix (0 when none)"""
    max_sequence = 0
    existing = queryset.filter(**{f'{field}__startswith': prefix}).values_list(field, flat=True)
    for number in existing:
        sequence = parse_sequence(number, prefix)
        if sequence is not None and sequence > max_sequence:
            max_sequence = sequence
    return max_sequence


def format_number(prefix, sequence, width):
    return f'{prefix}{str(sequence).zfill(width)}'


def next_number(queryset, field, prefix, width, offset=0):
    sequence = get_max_sequence(queryset, field, prefix) + 1 + offset
    return format_number(prefix, sequence, width)


def create_with_unique_number(create, generate, attempts=MAX_NUMBER_ATTEMPTS):
    """
    Persist a record whose number column is unique.

    ``generate(attempt)`` returns a candidate number and ``create(number)``
    writes the record. Each attempt runs in its own savepoint; on a unique
    constraint clash the number is regenerated with the attempt index as an
    offset. The IntegrityError of the last attempt propagates.
    """
    for attempt in range(attempts):
        number = generate(attempt)
        try:
            with transaction.atomic():
                return create(number)
        except IntegrityError:
            if attempt == attempts - 1:
                logger.error(f"Failed to allocate a unique number after {attempts} attempts (last tried {number})")
                raise
            logger.warning(f"Number {number} already taken, retrying ({attempt + 1}/{attempts})")
