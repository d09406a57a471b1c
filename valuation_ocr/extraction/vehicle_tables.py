"""Static vehicle reference tables.

VIN decoding data (world manufacturer identifiers and model-year codes)
and the manufacturer lexicon used to split "Make Model" strings.
"""

import re

VIN_LENGTH = 17

# Letters I, O and Q never appear in a VIN.
VIN_ALPHABET = frozenset("ABCDEFGHJKLMNPRSTUVWXYZ0123456789")

WMI_MANUFACTURERS: dict[str, str] = {
    "1FA": "Ford",
    "1FT": "Ford",
    "3FA": "Ford",
    "1G1": "Chevrolet",
    "1GC": "Chevrolet",
    "1GM": "Chevrolet",
    "2G1": "Chevrolet",
    "1G4": "Buick",
    "1HD": "Harley-Davidson",
    "2C3": "Chrysler",
    "2C4": "Chrysler",
    "2T1": "Toyota",
    "4T1": "Toyota",
    "3VW": "Volkswagen",
    "WVW": "Volkswagen",
    "5YJ": "Tesla",
    "JHM": "Honda",
    "JH4": "Acura",
    "JN1": "Nissan",
    "KMH": "Hyundai",
    "5XY": "Hyundai",
    "WBA": "BMW",
    "WBS": "BMW",
    "WBY": "BMW",
    "WDB": "Mercedes-Benz",
    "WDD": "Mercedes-Benz",
    "YV1": "Volvo",
}

# 10th VIN character. One 30-year cycle; the letters repeat from 2031.
MODEL_YEAR_CODES: dict[str, int] = {
    "V": 1997,
    "W": 1998,
    "X": 1999,
    "Y": 2000,
    "1": 2001,
    "2": 2002,
    "3": 2003,
    "4": 2004,
    "5": 2005,
    "6": 2006,
    "7": 2007,
    "8": 2008,
    "9": 2009,
    "A": 2010,
    "B": 2011,
    "C": 2012,
    "D": 2013,
    "E": 2014,
    "F": 2015,
    "G": 2016,
    "H": 2017,
    "J": 2018,
    "K": 2019,
    "L": 2020,
    "M": 2021,
    "N": 2022,
    "P": 2023,
    "R": 2024,
    "S": 2025,
    "T": 2026,
}

_YEAR_TO_CODE = {year: code for code, year in MODEL_YEAR_CODES.items()}

_RAW_MANUFACTURERS = [
    "Morgan Motor Company",
    "Mahindra & Mahindra",
    "McLaren Automotive",
    "Chevrolet Division",
    "Peugeot Citroën",
    "American Motors",
    "Harley Davidson",
    "Harley-Davidson",
    "General Motors",
    "Ashok Leyland",
    "Pinin Farina",
    "Aston Martin",
    "Alfa Romeo",
    "Land Rover",
    "Range Rover",
    "Rolls Royce",
    "Dodge Ram",
    "AM General",
    "Mercedes-Benz",
    "Acura",
    "Audi",
    "Bentley",
    "BMW",
    "Buick",
    "Cadillac",
    "Chevrolet",
    "Chrysler",
    "Dodge",
    "Ferrari",
    "Ford",
    "GMC",
    "Honda",
    "Hyundai",
    "Infiniti",
    "Jaguar",
    "Jeep",
    "Kia",
    "Lamborghini",
    "Lexus",
    "Lincoln",
    "Lucid",
    "Maserati",
    "Mazda",
    "Mercedes",
    "Mitsubishi",
    "Nissan",
    "Porsche",
    "Ram",
    "Rivian",
    "Subaru",
    "Tesla",
    "Toyota",
    "Volkswagen",
    "Volvo",
]

# Longest first so multi-word names win over their first word.
VEHICLE_MANUFACTURERS: tuple[str, ...] = tuple(
    sorted(_RAW_MANUFACTURERS, key=len, reverse=True)
)

# Leading-glyph losses seen in scanned reports.
MANUFACTURER_OCR_FRAGMENTS: dict[str, str] = {
    "oyota": "Toyota",
    "ord": "Ford",
    "mw": "BMW",
    "ercedes": "Mercedes",
    "olkswagen": "Volkswagen",
    "yundai": "Hyundai",
    "issan": "Nissan",
    "azda": "Mazda",
    "ubaru": "Subaru",
}

_VIN_PATTERN = re.compile(r"^[A-HJ-NPR-Z0-9]{17}$")


def is_valid_vin(vin: str) -> bool:
    """Check that a string is a 17-character VIN with letters and digits.

    Check digits are not verified; OCR'd VINs are often right except for
    the check digit and are still useful for decoding.
    """
    if not _VIN_PATTERN.match(vin):
        return False
    return any(c.isdigit() for c in vin) and any(c.isalpha() for c in vin)


def decode_year(vin: str) -> int | None:
    """Return the model year encoded in a VIN's 10th character, if known."""
    if len(vin) < 10:
        return None
    return MODEL_YEAR_CODES.get(vin[9].upper())


def decode_manufacturer(vin: str) -> str | None:
    """Return the manufacturer for a VIN's world manufacturer identifier."""
    if len(vin) < 3:
        return None
    return WMI_MANUFACTURERS.get(vin[:3].upper())


def year_to_code(year: int) -> str | None:
    """Return the 10th-character VIN code for a model year in the cycle."""
    return _YEAR_TO_CODE.get(year)
