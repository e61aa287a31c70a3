"""Persian number helpers used for amount input and receipts."""
from decimal import Decimal, ROUND_HALF_UP

ARABIC_INDIC_ZERO = 0x0660
EXTENDED_ARABIC_INDIC_ZERO = 0x06F0

UNITS = ['', 'یک', 'دو', 'سه', 'چهار', 'پنج', 'شش', 'هفت', 'هشت', 'نه']
TEENS = ['ده', 'یازده', 'دوازده', 'سیزده', 'چهارده', 'پانزده', 'شانزده', 'هفده', 'هجده', 'نوزده']
TENS = ['', 'ده', 'بیست', 'سی', 'چهل', 'پنجاه', 'شصت', 'هفتاد', 'هشتاد', 'نود']
HUNDREDS = ['', 'یکصد', 'دویست', 'سیصد', 'چهارصد', 'پانصد', 'ششصد', 'هفتصد', 'هشتصد', 'نهصد']
SCALES = ['', 'هزار', 'میلیون', 'میلیارد', 'تریلیون']

AND = ' و '


def persian_to_english_number(text):
    """Replace Persian and Arabic-Indic digits with ASCII digits.

    >>> persian_to_english_number('۱۲۳٫۵')
    '123٫5'
    """
    if text is None:
        return ''
    chars = []
    for char in str(text):
        code = ord(char)
        if ARABIC_INDIC_ZERO <= code <= ARABIC_INDIC_ZERO + 9:
            chars.append(str(code - ARABIC_INDIC_ZERO))
        elif EXTENDED_ARABIC_INDIC_ZERO <= code <= EXTENDED_ARABIC_INDIC_ZERO + 9:
            chars.append(str(code - EXTENDED_ARABIC_INDIC_ZERO))
        else:
            chars.append(char)
    return ''.join(chars)


def _three_digits(num):
    parts = []
    if num >= 100:
        parts.append(HUNDREDS[num // 100])
        num %= 100
    if num >= 20:
        parts.append(TENS[num // 10])
        num %= 10
    elif num >= 10:
        parts.append(TEENS[num - 10])
        num = 0
    if num > 0:
        parts.append(UNITS[num])
    return AND.join(parts)


def number_to_words(number):
    """Spell an amount in Persian words, hundredths after "ممیز"."""
    value = Decimal(str(number)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
    if value == 0:
        return 'صفر'
    if value < 0:
        return 'منفی ' + number_to_words(-value)

    integer_part = int(value)
    decimal_part = int((value - integer_part) * 100)

    chunks = []
    scale = 0
    remaining = integer_part
    while remaining > 0:
        chunk = remaining % 1000
        if chunk > 0:
            words = _three_digits(chunk)
            if scale > 0:
                # 1000 is "هزار", not "یک هزار"
                if chunk == 1 and scale == 1:
                    words = SCALES[scale]
                else:
                    words = f'{words} {SCALES[scale]}'
            chunks.insert(0, words)
        remaining //= 1000
        scale += 1

    text = AND.join(chunks)
    if decimal_part > 0:
        fraction = _three_digits(decimal_part)
        text = f'{text} ممیز {fraction}' if text else fraction

    return ' '.join(text.split())
