import logging
import os
import tempfile
from collections.abc import Callable
from pathlib import Path

import requests

from . import settings
from .exceptions import ExportError

logger = logging.getLogger(__name__)

Rasterizer = Callable[[str, Path], None]


def _current_umask() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return umask


def _atomic_write(target: Path, write: Callable[[Path], None]) -> Path:
    """
    Runs ``write`` against a temp file next to ``target`` and renames it into
    place. On any failure the temp file is removed and ``target`` is untouched.
    """
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        dir=target.parent, prefix=f".{target.stem}_", suffix=target.suffix
    )
    os.close(fd)
    tmp_path = Path(tmp_name)
    try:
        write(tmp_path)
        # mkstemp creates 0600; give the export the usual umask-derived mode
        os.chmod(tmp_path, 0o666 & ~_current_umask())
        os.replace(tmp_path, target)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    return target


def save_export(content: str, filename: str, output_dir: Path | None = None) -> Path:
    """Writes a text export (CSV or HTML) as UTF-8, all-or-nothing."""
    target = (output_dir or settings.OUTPUT_DIR) / filename
    _atomic_write(target, lambda path: path.write_text(content, encoding="utf-8"))
    logger.info(f"✅ Export saved to: {target}")
    return target


def save_rendered(
    markup: str, filename: str, rasterizer: Rasterizer, output_dir: Path | None = None
) -> Path:
    """Rasterizes an HTML document (e.g. to PDF) straight into its final location."""
    target = (output_dir or settings.OUTPUT_DIR) / filename
    _atomic_write(target, lambda path: rasterizer(markup, path))
    logger.info(f"✅ Document rendered to: {target}")
    return target


def post_to_webhook(path: Path, mime_type: str, report_type: str) -> bool:
    """
    Shares an exported file by uploading it to the configured webhook.
    Returns False when no webhook is configured; raises ExportError when the
    upload itself fails.
    """
    if not settings.WEBHOOK_URL:
        logger.warning("⚠️ WEBHOOK_URL not set. Skipping share.")
        return False

    logger.info(f"🚀 Sharing {path.name} to webhook: {settings.WEBHOOK_URL}")

    try:
        with path.open("rb") as fh:
            response = requests.post(
                settings.WEBHOOK_URL,
                data={"reportType": report_type},
                files={"file": (path.name, fh, mime_type)},
                timeout=settings.REQUEST_TIMEOUT,
            )
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        logger.error(f"❌ Error posting to webhook: {e}")
        raise ExportError(f"Could not share {path.name}: {e}") from e

    logger.info(f"✅ {path.name} successfully shared.")
    return True
