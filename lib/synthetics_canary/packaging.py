"""
Source bundle packaging for layer-based Synthetics runtimes.

Node.js Synthetics runtimes load the canary script from a Lambda layer, so
user code has to sit under nodejs/node_modules/ inside the uploaded zip.
"""

import logging
import shutil
import tempfile
import zipfile
from pathlib import Path

from synthetics_canary import constants
from synthetics_canary.exceptions import ValidationError

logger = logging.getLogger(__name__)


def unzip_source(archive_path: str | Path, destination: str | Path) -> Path:
    """
    Extract a zip archive into a directory.

    Raises:
        ValidationError: If the archive is not a valid zip file
    """
    destination = Path(destination)
    destination.mkdir(parents=True, exist_ok=True)
    try:
        with zipfile.ZipFile(archive_path) as zipf:
            zipf.extractall(destination)
    except zipfile.BadZipFile as e:
        raise ValidationError(f"Source '{archive_path}' is not a valid zip archive") from e
    return destination


def zip_directory(source_dir: str | Path, archive_path: str | Path) -> Path:
    """
    Zip a directory tree, storing paths relative to source_dir.

    Args:
        source_dir: Directory to archive
        archive_path: Destination zip file

    Returns:
        Path of the written archive
    """
    source_dir = Path(source_dir)
    archive_path = Path(archive_path)
    with zipfile.ZipFile(archive_path, "w", zipfile.ZIP_DEFLATED) as zipf:
        for file_path in sorted(source_dir.rglob("*")):
            if file_path.is_file():
                zipf.write(file_path, file_path.relative_to(source_dir))
    return archive_path


def prepare_source_code(src: str | Path, work_dir: str | Path | None = None) -> Path:
    """
    Repackage canary source into the layout a layer runtime expects.

    Args:
        src: Zip archive or directory containing the canary code
        work_dir: Scratch directory; a fresh temporary one is used when omitted

    Returns:
        Path to a zip archive with the code under nodejs/node_modules/

    Raises:
        ValidationError: If src is missing or does not exist
    """
    if not src:
        raise ValidationError("required src not set")

    src = Path(src)
    if not src.exists():
        raise ValidationError(f"Source '{src}' does not exist")

    work_dir = Path(work_dir) if work_dir else Path(tempfile.mkdtemp(prefix="canary-"))
    layer_dir = work_dir / "layer"
    if layer_dir.exists():
        shutil.rmtree(layer_dir)
    module_root = layer_dir.joinpath(*constants.LAYER_MODULE_ROOT)

    if src.is_dir():
        shutil.copytree(src, module_root)
    else:
        unzip_source(src, module_root)

    archive = zip_directory(layer_dir, work_dir / "canary.zip")
    logger.info(f"Packaged canary source {src} into {archive}")
    return archive
