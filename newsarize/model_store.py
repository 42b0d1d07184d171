"""
Model store - manages the on-device model file.

Handles:
- Locating the installed model in the private model directory
- Rejecting implausibly small (corrupt) model files
- Importing a model from a plain file or from a .tar.gz archive
- Reporting copy progress
"""

import logging
import shutil
import tarfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Callable

logger = logging.getLogger(__name__)

MODEL_EXTENSIONS = (".bin", ".task", ".tflite", ".litertlm", ".gguf")
DEFAULT_MODEL_NAME = "gemma-model.bin"
PROGRESS_INTERVAL_SECONDS = 0.5
COPY_BUFFER_SIZE = 16 * 1024
BYTES_PER_MB = 1024 * 1024


# ─────────────────────────────────────────────────────────────
# Download / import state
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Downloading:
    progress: int  # percent, -1 when the total size is unknown
    downloaded_mb: float
    total_mb: float


@dataclass(frozen=True)
class Processing:
    pass


@dataclass(frozen=True)
class Finished:
    pass


@dataclass(frozen=True)
class Error:
    message: str


DownloadState = Idle | Downloading | Processing | Finished | Error

ProgressCallback = Callable[[Downloading], None]


class ModelImportError(Exception):
    """Raised when a model file could not be imported."""


@dataclass(frozen=True)
class ModelCheck:
    """Result of inspecting the model directory."""
    model_path: Path | None
    error: str | None = None

    @property
    def installed(self) -> bool:
        return self.model_path is not None and self.error is None


def is_model_file(name: str) -> bool:
    return name.lower().endswith(MODEL_EXTENSIONS)


class ModelStore:
    """The app-private model directory."""

    def __init__(self, model_dir: Path, min_size_bytes: int = 100 * BYTES_PER_MB):
        self.model_dir = model_dir
        self.min_size_bytes = min_size_bytes

    def _ensure_dir(self) -> Path:
        self.model_dir.mkdir(parents=True, exist_ok=True)
        return self.model_dir

    def model_files(self) -> list[Path]:
        if not self.model_dir.exists():
            return []
        return sorted(
            p for p in self.model_dir.iterdir()
            if p.is_file() and is_model_file(p.name)
        )

    def find_model_file(self) -> Path | None:
        files = self.model_files()
        return files[0] if files else None

    def check(self) -> ModelCheck:
        """
        Inspect the installed model.

        A file below the minimum size is treated as corrupt and deleted so it
        cannot cause repeated failed initializations.
        """
        model_path = self.find_model_file()
        if model_path is None:
            return ModelCheck(model_path=None, error="Kein Modell installiert.")

        size = model_path.stat().st_size
        if size < self.min_size_bytes:
            logger.warning(
                f"Model file {model_path.name} is only {size / BYTES_PER_MB:.1f} MB, deleting"
            )
            model_path.unlink(missing_ok=True)
            return ModelCheck(model_path=None, error="Modell war fehlerhaft (zu klein).")

        return ModelCheck(model_path=model_path)

    def delete_models(self) -> int:
        """Delete every model file. Returns the number removed."""
        removed = 0
        for path in self.model_files():
            path.unlink(missing_ok=True)
            removed += 1
        return removed

    def model_size_string(self) -> str:
        model_path = self.find_model_file()
        if model_path is None:
            return "Not downloaded"
        size = model_path.stat().st_size
        if size <= 0:
            return "Not downloaded"
        return f"{size / BYTES_PER_MB:.2f} MB"

    def import_model(
        self,
        source: Path,
        file_name: str | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> Path:
        """
        Copy a model into the model directory, replacing any previous model.

        Args:
            source: Model file or .tar.gz archive containing one
            file_name: Display name of the source (defaults to source.name)
            on_progress: Called at most every 500 ms while copying

        Returns:
            Path of the installed model file

        Raises:
            ModelImportError: If the archive holds no model file or copying fails
        """
        file_name = file_name or source.name
        output_dir = self._ensure_dir()
        self.delete_models()

        try:
            with open(source, "rb") as stream:
                if file_name.lower().endswith(".tar.gz"):
                    return self._extract_from_archive(stream, output_dir, on_progress)
                dest = output_dir / (Path(file_name).name or DEFAULT_MODEL_NAME)
                if not is_model_file(dest.name):
                    dest = output_dir / DEFAULT_MODEL_NAME
                total = source.stat().st_size
                self._copy_stream(stream, dest, total, on_progress)
                return dest
        except (OSError, tarfile.TarError) as e:
            raise ModelImportError(f"Kopieren fehlgeschlagen: {e}") from e

    def _extract_from_archive(
        self,
        stream: BinaryIO,
        output_dir: Path,
        on_progress: ProgressCallback | None,
    ) -> Path:
        """Extract the first model-file entry of a gzip-compressed tar stream."""
        with tarfile.open(fileobj=stream, mode="r|gz") as archive:
            for member in archive:
                if not member.isfile() or not is_model_file(member.name):
                    continue
                entry = archive.extractfile(member)
                if entry is None:
                    continue
                # Keep only the base name so entries cannot escape the model directory
                dest = output_dir / Path(member.name).name
                with entry:
                    self._copy_stream(entry, dest, member.size, on_progress)
                return dest

        raise ModelImportError(
            "Keine valide Modelldatei (" + ", ".join(MODEL_EXTENSIONS) + ") im .tar.gz-Archiv gefunden!"
        )

    def _copy_stream(
        self,
        source: BinaryIO,
        dest: Path,
        total_bytes: int,
        on_progress: ProgressCallback | None,
    ):
        """Stream into a temporary file, then move it into place."""
        partial = dest.with_name(dest.name + ".part")
        copied = 0
        last_update = time.monotonic()
        try:
            with open(partial, "wb") as output:
                while True:
                    buffer = source.read(COPY_BUFFER_SIZE)
                    if not buffer:
                        break
                    output.write(buffer)
                    copied += len(buffer)

                    now = time.monotonic()
                    if on_progress and now - last_update >= PROGRESS_INTERVAL_SECONDS:
                        on_progress(_progress(copied, total_bytes))
                        last_update = now
            shutil.move(str(partial), str(dest))
        finally:
            partial.unlink(missing_ok=True)

        logger.info(f"Installed model {dest.name} ({copied / BYTES_PER_MB:.1f} MB)")


def _progress(copied: int, total: int) -> Downloading:
    return Downloading(
        progress=int(copied * 100 / total) if total > 0 else -1,
        downloaded_mb=copied / BYTES_PER_MB,
        total_mb=total / BYTES_PER_MB if total > 0 else 0.0,
    )
