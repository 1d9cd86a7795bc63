"""
Invoice aggregation: VAT per line, per-currency totals and amounts in words.

All arithmetic is done on ``Decimal``; inputs may be ints, floats, strings
or Decimals.
"""
from decimal import Decimal, ROUND_HALF_UP

DEFAULT_VAT_PERCENT = Decimal('18')

CENT = Decimal('0.01')

ONES = [
    '', 'One', 'Two', 'Three', 'Four', 'Five', 'Six', 'Seven', 'Eight', 'Nine',
    'Ten', 'Eleven', 'Twelve', 'Thirteen', 'Fourteen', 'Fifteen', 'Sixteen',
    'Seventeen', 'Eighteen', 'Nineteen',
]
TENS = ['', '', 'Twenty', 'Thirty', 'Forty', 'Fifty', 'Sixty', 'Seventy', 'Eighty', 'Ninety']
SCALES = ['', 'Thousand', 'Million', 'Billion']

# currency code -> (major unit, minor unit)
CURRENCY_UNITS = {
    'USD': ('Dollars', 'Cents'),
    'RWF': ('Francs', 'Centimes'),
}


def to_decimal(value):
    if value is None or value == '':
        return Decimal('0')
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def money(value):
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def line_vat(amount, vat_enabled, vat_percent=DEFAULT_VAT_PERCENT):
    """VAT for one line: amount * percent / 100 when enabled, otherwise zero"""
    if not vat_enabled:
        return Decimal('0.00')
    return money(to_decimal(amount) * to_decimal(vat_percent) / 100)


def _vat_percent(item):
    percent = item.get('vat_percent')
    if percent in (None, ''):
        return DEFAULT_VAT_PERCENT
    return to_decimal(percent)


def _item_vat(item):
    return line_vat(item.get('amount'), item.get('vat_enabled', False), _vat_percent(item))


def summarize_services(items):
    """
    Group service lines by currency.

    Each item is a mapping with ``amount``, ``currency``, ``vat_enabled`` and
    ``vat_percent``. Returns ``{currency: {'sub_total', 'vat_total', 'total'}}``
    with currencies in the order they first appear.
    """
    summary = {}
    for item in items:
        currency = (item.get('currency') or 'USD').upper()
        totals = summary.setdefault(currency, {
            'sub_total': Decimal('0.00'),
            'vat_total': Decimal('0.00'),
            'total': Decimal('0.00'),
        })
        amount = money(item.get('amount'))
        vat = _item_vat(item)
        totals['sub_total'] += amount
        totals['vat_total'] += vat
        totals['total'] += amount + vat
    return summary


def build_line_items(items, currency=None):
    """
    Invoice line items for the service lines in ``currency`` (all lines when None).

    ``billing_amount`` is the line amount plus its VAT.
    """
    line_items = []
    for item in items:
        item_currency = (item.get('currency') or 'USD').upper()
        if currency and item_currency != currency.upper():
            continue
        amount = money(item.get('amount'))
        vat_enabled = bool(item.get('vat_enabled', False))
        tax_amount = _item_vat(item)
        tax_percent = _vat_percent(item) if vat_enabled else None
        line_items.append({
            'description': item.get('description') or item.get('name') or '',
            'based_on': item.get('based_on') or 'Service',
            'rate': money(item.get('rate', amount)),
            'currency': item_currency,
            'amount': amount,
            'tax_percent': tax_percent,
            'tax_amount': tax_amount,
            'billing_amount': amount + tax_amount,
        })
    return line_items


def _hundreds_to_words(number):
    words = []
    if number >= 100:
        words.append(f'{ONES[number // 100]} Hundred')
        number %= 100
    if number >= 20:
        tens = TENS[number // 10]
        words.append(f'{tens}-{ONES[number % 10]}' if number % 10 else tens)
    elif number > 0:
        words.append(ONES[number])
    return ' '.join(words)


def integer_to_words(number):
    """English words for a non-negative integer below one trillion ('' for zero)"""
    if number < 0:
        raise ValueError("Cannot convert a negative number to words")
    if number >= 1000 ** len(SCALES):
        raise ValueError(f"Number too large to convert to words: {number}")

    groups = []
    scale = 0
    while number > 0:
        chunk = number % 1000
        if chunk:
            chunk_words = _hundreds_to_words(chunk)
            groups.insert(0, f'{chunk_words} {SCALES[scale]}'.strip())
        number //= 1000
        scale += 1
    return ' '.join(groups)


def number_to_words(amount, currency='USD'):
    """
    Amount in words as printed on invoices.

    >>> number_to_words(2500.50, 'USD')
    'Two Thousand Five Hundred Dollars And Fifty Cents'
    """
    currency = (currency or 'USD').upper()
    value = money(amount)
    if value < 0:
        raise ValueError("Cannot convert a negative amount to words")
    if value == 0:
        return f'Zero {currency}'

    whole = int(value)
    cents = int((value - whole) * 100)
    major, minor = CURRENCY_UNITS.get(currency, (currency, 'Cents'))

    result = f'{integer_to_words(whole) or "Zero"} {major}'
    if cents:
        result += f' And {integer_to_words(cents)} {minor}'
    return result
