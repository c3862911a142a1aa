"""Manifest engine: walks a folder into a content-addressed manifest"""

import logging
from pathlib import Path
from typing import Optional, Union

from ..api.exceptions import ValidationError
from ..models.config import ManifestConfig
from ..models.manifest import AssetSource, FileEntry, Manifest, ManifestBuild
from ..utils.file_utils import (
    format_size,
    guess_content_type,
    normalize_relative_path,
    scan_directory,
)
from ..utils.hash_utils import file_fingerprint

logger = logging.getLogger(__name__)


class ManifestEngine:
    """Engine for building deployment manifests"""

    def __init__(self, config: Optional[ManifestConfig] = None):
        """Initialize manifest engine

        Args:
            config: Ignore patterns and size limits
        """
        self.config = config or ManifestConfig()

    def build(self, root: Union[str, Path]) -> ManifestBuild:
        """Build the manifest for a folder

        Args:
            root: Folder to publish

        Returns:
            Manifest, per-file entries and the fingerprint -> source index

        Raises:
            ValidationError: Missing folder, empty folder, oversized file,
                too many files or colliding paths
        """
        root = Path(root)
        if not root.is_dir():
            raise ValidationError(f"Not a directory: {root}", path=str(root))

        manifest = Manifest()
        build = ManifestBuild(root=root, manifest=manifest)

        for file_path in scan_directory(root, self.config.ignore):
            relative_path = normalize_relative_path(file_path.relative_to(root).as_posix())

            if relative_path in manifest:
                raise ValidationError(
                    f"Duplicate path in manifest: {relative_path} ({file_path})",
                    path=relative_path
                )

            size = file_path.stat().st_size
            if size == 0:
                # The upload API rejects empty values
                logger.warning("Skipping empty file: %s", relative_path)
                continue

            if size > self.config.max_file_size:
                raise ValidationError(
                    f"File too large: {relative_path} is {format_size(size)}, "
                    f"limit is {format_size(self.config.max_file_size)}",
                    path=relative_path
                )

            if len(build.entries) >= self.config.max_files:
                raise ValidationError(
                    f"Too many files: more than {self.config.max_files} in {root}",
                    path=relative_path
                )

            fingerprint = file_fingerprint(file_path)
            content_type = guess_content_type(relative_path)

            manifest.add(relative_path, fingerprint)
            build.entries.append(FileEntry(
                relative_path=relative_path,
                fingerprint=fingerprint,
                size=size,
                content_type=content_type
            ))
            # Identical content under several paths is uploaded once
            build.index.setdefault(fingerprint, AssetSource(file_path, size, content_type))

        if not build.entries:
            raise ValidationError(f"No files to deploy in {root}", path=str(root))

        logger.info(
            "Manifest built: %d files, %d unique, %s",
            len(build.entries), len(build.index), format_size(build.total_size)
        )
        return build
