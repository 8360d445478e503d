"""Spelled-out cardinal number tables, keyed by language tag."""
from typing import Dict

DEFAULT_LOCALE = "en"

_EN_UNITS = {
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
    "six": 6,
    "seven": 7,
    "eight": 8,
    "nine": 9,
}

_EN_TEENS = {
    "ten": 10,
    "eleven": 11,
    "twelve": 12,
    "thirteen": 13,
    "fourteen": 14,
    "fifteen": 15,
    "sixteen": 16,
    "seventeen": 17,
    "eighteen": 18,
    "nineteen": 19,
}

_EN_TENS = {
    "twenty": 20,
    "thirty": 30,
    "forty": 40,
    "fifty": 50,
    "sixty": 60,
    "seventy": 70,
    "eighty": 80,
    "ninety": 90,
}


def _english() -> Dict[str, int]:
    table = {**_EN_UNITS, **_EN_TEENS, **_EN_TENS}
    for tens_word, tens in _EN_TENS.items():
        if tens == 90:
            continue
        for unit_word, unit in _EN_UNITS.items():
            table[f"{tens_word}-{unit_word}"] = tens + unit
    return table


# Accents are stripped during normalization, so keys are plain ASCII.
_SPANISH = {
    "un": 1,
    "una": 1,
    "uno": 1,
    "dos": 2,
    "tres": 3,
    "cuatro": 4,
    "cinco": 5,
    "seis": 6,
    "siete": 7,
    "ocho": 8,
    "nueve": 9,
    "diez": 10,
    "once": 11,
    "doce": 12,
    "trece": 13,
    "catorce": 14,
    "quince": 15,
    "dieciseis": 16,
    "diecisiete": 17,
    "dieciocho": 18,
    "diecinueve": 19,
    "veinte": 20,
    "veintiuno": 21,
    "veintidos": 22,
    "veintitres": 23,
    "veinticuatro": 24,
    "veinticinco": 25,
    "veintiseis": 26,
    "veintisiete": 27,
    "veintiocho": 28,
    "veintinueve": 29,
    "treinta": 30,
    "cuarenta": 40,
    "cincuenta": 50,
    "sesenta": 60,
    "setenta": 70,
    "ochenta": 80,
    "noventa": 90,
}

NUMBER_WORDS: Dict[str, Dict[str, int]] = {
    "en": _english(),
    "es": _SPANISH,
}


def get_number_words(locale: str = DEFAULT_LOCALE) -> Dict[str, int]:
    """
    Return the number-word table for a language tag.

    Region subtags are ignored (``es-MX`` uses ``es``); unknown languages
    fall back to English.
    """
    language = (locale or DEFAULT_LOCALE).lower().replace("_", "-").split("-")[0]
    return NUMBER_WORDS.get(language, NUMBER_WORDS[DEFAULT_LOCALE])
