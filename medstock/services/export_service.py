"""
Stock Export Service
CSV rendering of location stock listings
"""
import csv
import io
from typing import Iterable

CSV_HEADER = ["Name", "Quantity", "Category", "Entry Date"]
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def export_stock_csv(records: Iterable) -> str:
    """Render stock records as CSV text with a header row"""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)

    for record in records:
        entry = record.entry_timestamp
        writer.writerow([
            record.name,
            record.quantity,
            record.category or "",
            entry.strftime(TIMESTAMP_FORMAT) if entry else "",
        ])

    return buffer.getvalue()
