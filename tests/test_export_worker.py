"""Tests for the background export worker."""

from pathlib import Path

from boxmark.core.exporter import AnnotationExporter
from boxmark.core.models import ExportRequest, Rectangle
from boxmark.workers.export_worker import ExportWorker


def make_requests(directory, count):
    return [
        ExportRequest(
            str(Path(directory) / f"img{i}.jpg"),
            [Rectangle(x=10, y=10, width=20, height=20)],
            100,
            100,
        )
        for i in range(count)
    ]


class TestExportWorker:
    """Tests for ExportWorker."""

    def test_run_emits_progress_and_result(self, qapp, tmp_path):
        """Test that running the worker reports progress and the batch result."""
        worker = ExportWorker(AnnotationExporter(), make_requests(tmp_path, 3))
        progress = []
        finished = []
        worker.progress.connect(lambda done, total: progress.append((done, total)))
        worker.export_finished.connect(finished.append)

        worker.run()

        assert progress == [(1, 3), (2, 3), (3, 3)]
        assert len(finished) == 1
        assert finished[0].successful_exports == 3
        assert (tmp_path / "img2.txt").exists()

    def test_run_in_thread(self, qapp, tmp_path):
        """Test the worker as a real background thread."""
        worker = ExportWorker(AnnotationExporter(), make_requests(tmp_path, 2))

        worker.start()
        assert worker.wait(10000) is True

        assert (tmp_path / "img0.txt").exists()
        assert (tmp_path / "img1.txt").exists()
