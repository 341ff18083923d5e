"""
Configuration management for the backup archive core.

All configuration is done via environment variables, no config files.
This module provides typed configuration classes with validation.

Invariants:
    - All settings have sensible defaults for a desktop installation
    - Changing a setting never changes the on-disk member naming or the
      JSON header convention, only how members are compressed and logged

How to change safely:
    - Add new settings with defaults that maintain backward compatibility
    - Deprecate settings by logging warnings but continuing to support them
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from .container.zip_archive import COMPRESSION_METHODS

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 16 * 1024  # 16KiB


@dataclass(frozen=True)
class ArchiveConfig:
    """Archive container configuration.

    Attributes:
        compression: Member compression ("deflated" or "stored")
        compresslevel: zlib level (0-9) for deflated members
        chunk_size: Read buffer size when streaming the data member
        data_stream_name: Logical name of the data member ("[DAT] <name>")
    """

    compression: str = "deflated"
    compresslevel: int = 6
    chunk_size: int = DEFAULT_CHUNK_SIZE
    data_stream_name: str = "entries"

    @classmethod
    def from_env(cls) -> ArchiveConfig:
        """Load configuration from environment variables."""
        return cls(
            compression=os.getenv("BACKUP_COMPRESSION", "deflated").lower(),
            compresslevel=int(os.getenv("BACKUP_COMPRESSLEVEL", "6")),
            chunk_size=int(os.getenv("BACKUP_CHUNK_SIZE", str(DEFAULT_CHUNK_SIZE))),
            data_stream_name=os.getenv("BACKUP_DATA_STREAM", "entries"),
        )


@dataclass(frozen=True)
class ObservabilityConfig:
    """Logging configuration.

    Attributes:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: Log format (json, text)
    """

    log_level: str = "INFO"
    log_format: str = "text"

    @classmethod
    def from_env(cls) -> ObservabilityConfig:
        """Load configuration from environment variables."""
        return cls(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "text").lower(),
        )


@dataclass
class BackupConfig:
    """Complete configuration.

    Attributes:
        archive: Archive container configuration
        observability: Logging configuration
    """

    archive: ArchiveConfig = field(default_factory=ArchiveConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)

    @classmethod
    def from_env(cls) -> BackupConfig:
        """Load complete configuration from environment variables.

        Raises:
            ValueError: If configuration is invalid.
        """
        config = cls(
            archive=ArchiveConfig.from_env(),
            observability=ObservabilityConfig.from_env(),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Validate configuration consistency.

        Raises:
            ValueError: If configuration is invalid.
        """
        if self.archive.compression not in COMPRESSION_METHODS:
            raise ValueError(
                f"Invalid BACKUP_COMPRESSION '{self.archive.compression}'. "
                "Must be one of: deflated, stored"
            )
        if not 0 <= self.archive.compresslevel <= 9:
            raise ValueError("BACKUP_COMPRESSLEVEL must be between 0 and 9")
        if self.archive.chunk_size <= 0:
            raise ValueError("BACKUP_CHUNK_SIZE must be positive")
        if not self.archive.data_stream_name:
            raise ValueError("BACKUP_DATA_STREAM must not be empty")
        if self.observability.log_format not in ("json", "text"):
            raise ValueError(
                f"Invalid LOG_FORMAT '{self.observability.log_format}'. Must be one of: json, text"
            )

        if self.archive.chunk_size != DEFAULT_CHUNK_SIZE:
            logger.warning(
                f"BACKUP_CHUNK_SIZE is {self.archive.chunk_size}, "
                f"data callbacks will not receive {DEFAULT_CHUNK_SIZE}-byte chunks"
            )

    def log_config(self) -> None:
        """Log configuration."""
        logger.info(
            "Backup configuration loaded",
            extra={
                "compression": self.archive.compression,
                "compresslevel": self.archive.compresslevel,
                "chunk_size": self.archive.chunk_size,
                "data_stream_name": self.archive.data_stream_name,
                "log_level": self.observability.log_level,
                "log_format": self.observability.log_format,
            },
        )
