import os
import stat

import pytest
import requests

from report_engine import data_handler, settings
from report_engine.exceptions import ExportError


def test_save_export_writes_utf8(tmp_path):
    path = data_handler.save_export("Name\nKāmal\n", "report_2024-05-20.csv", tmp_path)

    assert path == tmp_path / "report_2024-05-20.csv"
    assert path.read_text(encoding="utf-8") == "Name\nKāmal\n"
    assert list(tmp_path.iterdir()) == [path]


def test_save_export_uses_umask_mode(tmp_path):
    umask = os.umask(0o022)
    try:
        path = data_handler.save_export("a,b\n", "report.csv", tmp_path)
    finally:
        os.umask(umask)
    assert stat.S_IMODE(path.stat().st_mode) == 0o644


def test_save_export_replaces_existing_file(tmp_path):
    data_handler.save_export("old", "report.csv", tmp_path)
    path = data_handler.save_export("new", "report.csv", tmp_path)
    assert path.read_text(encoding="utf-8") == "new"


def test_failed_render_leaves_no_partial_file(tmp_path):
    target = tmp_path / "report.pdf"
    target.write_bytes(b"previous")

    def broken_rasterizer(markup, path):
        path.write_bytes(b"%PDF-partial")
        raise RuntimeError("renderer crashed")

    with pytest.raises(RuntimeError):
        data_handler.save_rendered("<html></html>", "report.pdf", broken_rasterizer, tmp_path)

    assert target.read_bytes() == b"previous"
    assert list(tmp_path.iterdir()) == [target]


def test_save_rendered(tmp_path):
    def rasterizer(markup, path):
        path.write_bytes(markup.encode("utf-8"))

    path = data_handler.save_rendered("<p>ok</p>", "report.pdf", rasterizer, tmp_path)
    assert path.read_bytes() == b"<p>ok</p>"


def test_webhook_skipped_without_url(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "WEBHOOK_URL", None)
    path = data_handler.save_export("a", "report.csv", tmp_path)
    assert data_handler.post_to_webhook(path, "text/csv", "inventory") is False


def test_webhook_upload(tmp_path, monkeypatch):
    calls = []

    class Response:
        def raise_for_status(self):
            pass

    def fake_post(url, data=None, files=None, timeout=None):
        name, fh, mime_type = files["file"]
        calls.append((url, data, name, fh.read(), mime_type))
        return Response()

    monkeypatch.setattr(settings, "WEBHOOK_URL", "http://hook.test/upload")
    monkeypatch.setattr(data_handler.requests, "post", fake_post)
    path = data_handler.save_export("a,b\n", "report.csv", tmp_path)

    assert data_handler.post_to_webhook(path, "text/csv", "sales") is True
    assert calls == [("http://hook.test/upload", {"reportType": "sales"}, "report.csv", b"a,b\n", "text/csv")]


def test_webhook_failure_raises_export_error(tmp_path, monkeypatch):
    def fake_post(*args, **kwargs):
        raise requests.exceptions.ConnectionError("connection refused")

    monkeypatch.setattr(settings, "WEBHOOK_URL", "http://hook.test/upload")
    monkeypatch.setattr(data_handler.requests, "post", fake_post)
    path = data_handler.save_export("a", "report.csv", tmp_path)

    with pytest.raises(ExportError, match="Could not share report.csv"):
        data_handler.post_to_webhook(path, "text/csv", "sales")
