from prometheus_client import REGISTRY, Counter, write_to_textfile

# operation: upload_whole / upload_multipart / download_one / download_bucket
TRANSFERS = Counter(
    "s3console_transfers_total",
    "Total transfer operations",
    ["operation", "outcome"],
)

TRANSFER_BYTES = Counter(
    "s3console_transfer_bytes_total",
    "Bytes moved to or from the object store",
    ["direction"],
)

MULTIPART_PARTS = Counter(
    "s3console_multipart_parts_total",
    "Multipart upload parts stored",
)

MULTIPART_ABORTS = Counter(
    "s3console_multipart_aborts_total",
    "Multipart upload abort requests",
    ["outcome"],
)


def write_metrics(path: str) -> None:
    """Dump every counter to ``path`` for a node_exporter textfile collector."""
    write_to_textfile(path, REGISTRY)
