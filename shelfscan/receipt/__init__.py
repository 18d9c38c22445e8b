"""Receipt parsing: store dispatch, format parsers, OCR adapters."""
