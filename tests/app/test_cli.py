from __future__ import annotations

import pytest

from s3console.common.config import Settings
from s3console.infra.storage.client import StorageError
from s3console.main import build_parser, run
from s3console.services.bundle import TransferServiceBundle
from s3console.services.multipart import MIB


@pytest.fixture()
def bundle(mock_storage, settings):
    return TransferServiceBundle(store=mock_storage, settings=settings)


@pytest.fixture(autouse=True)
def _logging(reset_logging):
    yield


class TestParser:
    def test_requires_command(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_upload_part_size_is_optional(self):
        args = build_parser().parse_args(["upload", "b", "f.txt"])

        assert args.part_size is None
        assert args.multipart is False

    def test_download_bucket_flags(self):
        args = build_parser().parse_args(["download-bucket", "b", "out", "--overwrite"])

        assert args.command == "download-bucket"
        assert args.overwrite is True


class TestRun:
    def test_whole_file_upload(self, tmp_path, bundle, mock_storage):
        path = tmp_path / "notes.txt"
        path.write_text("hello")

        code = run(["--no-progress", "upload", "b", str(path)], bundle=bundle)

        assert code == 0
        assert mock_storage.object_data("b", "notes.txt") == b"hello"
        assert mock_storage.called("init_multipart_upload") == []

    def test_multipart_upload(self, tmp_path, bundle, mock_storage):
        path = tmp_path / "big.bin"
        path.write_bytes(b"x" * (6 * MIB))

        code = run(
            ["--no-progress", "upload", "b", str(path), "--part-size", "1"], bundle=bundle
        )

        assert code == 0
        assert len(mock_storage.called("upload_part")) == 2

    def test_multipart_flag_uses_configured_part_size(self, tmp_path, mock_storage):
        settings = Settings(TRANSFER_PART_SIZE_MB=6, TRANSFER_CHUNK_BYTES=1024)
        bundle = TransferServiceBundle(store=mock_storage, settings=settings)
        path = tmp_path / "big.bin"
        path.write_bytes(b"x" * (7 * MIB))

        code = run(["--no-progress", "upload", "b", str(path), "--multipart"], bundle=bundle)

        assert code == 0
        lengths = [c["length"] for c in mock_storage.called("upload_part")]
        assert lengths == [6 * MIB, MIB]

    def test_metrics_file_written_on_failure(self, tmp_path, bundle):
        metrics = tmp_path / "metrics.prom"

        code = run(
            ["--metrics-file", str(metrics), "upload", "b", str(tmp_path / "nope.txt")],
            bundle=bundle,
        )

        assert code == 1
        text = metrics.read_text()
        sample = 's3console_transfers_total{operation="upload_whole",outcome="FileNotFound"}'
        assert sample in text

    def test_upload_missing_file_exits_non_zero(self, tmp_path, bundle):
        code = run(["upload", "b", str(tmp_path / "missing.txt")], bundle=bundle)

        assert code == 1

    def test_multipart_failure_exits_non_zero(self, tmp_path, bundle, mock_storage):
        path = tmp_path / "big.bin"
        path.write_bytes(b"x" * 10)
        mock_storage.fail["upload_part"] = StorageError("boom")
        mock_storage.fail["abort_multipart_upload"] = StorageError("abort boom")

        code = run(["upload", "b", str(path), "--part-size", "5"], bundle=bundle)

        assert code == 1

    def test_download(self, tmp_path, bundle, mock_storage):
        mock_storage.add_object("b", "dir/a.txt", b"data")

        code = run(["download", "b", "dir/a.txt", str(tmp_path / "out")], bundle=bundle)

        assert code == 0
        assert (tmp_path / "out" / "dir" / "a.txt").read_bytes() == b"data"

    def test_download_existing_without_overwrite(self, tmp_path, bundle, mock_storage):
        mock_storage.add_object("b", "a.txt", b"new")
        (tmp_path / "a.txt").write_bytes(b"old")

        code = run(["download", "b", "a.txt", str(tmp_path)], bundle=bundle)

        assert code == 1
        assert (tmp_path / "a.txt").read_bytes() == b"old"

    def test_download_bucket(self, tmp_path, bundle, mock_storage):
        mock_storage.add_object("b", "img/logo.png", b"PNG")
        mock_storage.add_object("b", "img/", b"")

        code = run(["download-bucket", "b", str(tmp_path / "m")], bundle=bundle)

        assert code == 0
        assert (tmp_path / "m" / "img" / "logo.png").read_bytes() == b"PNG"

    def test_download_bucket_partial_failure(self, tmp_path, bundle, mock_storage):
        mock_storage.add_object("b", "ok.txt", b"ok")
        mock_storage.add_object("b", "bad.txt", b"bad")
        mock_storage.fail["get_object:bad.txt"] = StorageError("boom")

        code = run(["download-bucket", "b", str(tmp_path)], bundle=bundle)

        assert code == 1
        assert (tmp_path / "ok.txt").exists()

    def test_download_bucket_listing_failure(self, tmp_path, bundle, mock_storage):
        mock_storage.fail["list_objects"] = StorageError("NoSuchBucket")

        code = run(["download-bucket", "b", str(tmp_path)], bundle=bundle)

        assert code == 1

    def test_progress_goes_to_stdout(self, tmp_path, bundle, capsys, monkeypatch):
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        monkeypatch.setattr(
            "s3console.main.get_service_bundle",
            lambda settings, reporter: TransferServiceBundle(
                store=bundle.store, reporter=reporter, settings=settings
            ),
        )

        code = run(["upload", "b", str(path)])

        assert code == 0
        assert capsys.readouterr().out == "\r100\n"
