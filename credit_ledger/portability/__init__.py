"""Import/export package."""

from credit_ledger.portability.codec import (
    export_file_name,
    parse_collection,
    serialize_collection,
)

__all__ = ["export_file_name", "parse_collection", "serialize_collection"]
