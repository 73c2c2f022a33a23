from ingestion.bank_csv import (
    BankRecord,
    CSVValidationError,
    decode,
    infer_category,
    ingest,
)

__all__ = ["BankRecord", "CSVValidationError", "decode", "infer_category", "ingest"]
