"""Total-loss valuation report extraction.

OCR pipeline that rasterizes scanned Mitchell and CCC One valuation PDFs,
recognizes them with Tesseract, repairs common OCR errors and recovers a
structured vehicle record with a confidence score.
"""
