from __future__ import annotations

from prometheus_client import REGISTRY

from s3console.infra.observability.metrics import write_metrics
from s3console.infra.storage.client import StorageError
from s3console.services.multipart import MultipartUploadOrchestrator
from s3console.services.single_transfer import SingleObjectTransfer


def _sample(name: str, labels: dict[str, str] | None = None) -> float:
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


def test_transfer_counters(tmp_path, mock_storage, settings):
    path = tmp_path / "a.txt"
    path.write_bytes(b"12345")
    transfer = SingleObjectTransfer(mock_storage, settings=settings)
    labels = {"operation": "upload_whole", "outcome": "success"}
    before = _sample("s3console_transfers_total", labels)
    bytes_before = _sample("s3console_transfer_bytes_total", {"direction": "upload"})

    transfer.upload_whole("b", path)

    assert _sample("s3console_transfers_total", labels) == before + 1
    assert _sample("s3console_transfer_bytes_total", {"direction": "upload"}) == bytes_before + 5


def test_abort_counters(tmp_path, mock_storage, settings):
    path = tmp_path / "a.txt"
    path.write_bytes(b"12345")
    mock_storage.fail["upload_part"] = StorageError("boom")
    orchestrator = MultipartUploadOrchestrator(mock_storage, settings=settings)
    labels = {"outcome": "success"}
    before = _sample("s3console_multipart_aborts_total", labels)
    failed_labels = {"operation": "upload_multipart", "outcome": "RemoteServiceError"}
    failed_before = _sample("s3console_transfers_total", failed_labels)

    orchestrator.upload("b", path)

    assert _sample("s3console_multipart_aborts_total", labels) == before + 1
    assert _sample("s3console_transfers_total", failed_labels) == failed_before + 1


def test_write_metrics_dumps_text_format(tmp_path):
    target = tmp_path / "s3console.prom"

    write_metrics(str(target))

    text = target.read_text()
    assert "# TYPE s3console_transfers_total counter" in text
    assert "s3console_multipart_aborts_total" in text
