"""Configuration loader with validation and checksums."""

import hashlib
import json
import time
from pathlib import Path
from typing import TypeVar

import structlog
import yaml
from pydantic import BaseModel, ValidationError

from src.config.constants import (
    AGENCY_RATING_SUFFIXES,
    COMPONENT_CONFIG,
    FILE_TYPE_AGENCY_RATING,
    FILE_TYPE_RANKING,
)
from src.config.schemas.ranking import AgencyRatingConfig, RankingConfig


logger = structlog.get_logger()

ModelT = TypeVar("ModelT", bound=BaseModel)


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""

    def __init__(self, errors: list[dict[str, str]], file_path: str) -> None:
        """Initialize the error.

        Args:
            errors: List of validation error details.
            file_path: Path to the file that failed validation.
        """
        self.errors = errors
        self.file_path = file_path
        super().__init__(f"Validation failed for {file_path}: {len(errors)} errors")


class ConfigLoader:
    """Loads and validates ranking configuration files.

    Every loaded file is checksummed so that a ranking pass can be traced
    back to the exact configuration it ran with.
    """

    def __init__(self, run_id: str) -> None:
        """Initialize the loader.

        Args:
            run_id: Unique identifier for the current run.
        """
        self._run_id = run_id
        self._file_checksums: dict[str, str] = {}
        self._validation_errors: list[dict[str, str]] = []
        self._validation_duration_ms: float = 0
        self._log = logger.bind(run_id=run_id, component=COMPONENT_CONFIG)

    @property
    def file_checksums(self) -> dict[str, str]:
        """Get SHA-256 checksums of loaded files."""
        return self._file_checksums.copy()

    @property
    def validation_errors(self) -> list[dict[str, str]]:
        """Get validation errors if any."""
        return self._validation_errors.copy()

    @property
    def validation_duration_ms(self) -> float:
        """Get cumulative validation duration in milliseconds."""
        return self._validation_duration_ms

    def load_ranking(self, file_path: Path | None) -> RankingConfig:
        """Load ranking.yaml, or the defaults when no path is given.

        Args:
            file_path: Path to the ranking YAML file.

        Returns:
            Validated RankingConfig.

        Raises:
            ConfigValidationError: If parsing or validation fails.
            FileNotFoundError: If the file does not exist.
        """
        if file_path is None:
            self._log.info("ranking_config_defaults")
            return RankingConfig()

        data = self._read_file(file_path, FILE_TYPE_RANKING)
        return self._validate(RankingConfig, data, file_path)

    def load_agency_rating(self, file_path: Path | None) -> dict[str, float]:
        """Load an agency rating file mapping host to score.

        YAML and JSON files are accepted.

        Args:
            file_path: Path to the rating file.

        Returns:
            Host to non-negative score mapping, empty when no path is given.

        Raises:
            ConfigValidationError: If parsing or validation fails.
            FileNotFoundError: If the file does not exist.
        """
        if file_path is None:
            self._log.info("agency_rating_empty")
            return {}

        if file_path.suffix.lower() not in AGENCY_RATING_SUFFIXES:
            error = {
                "loc": "file",
                "msg": f"Unsupported suffix {file_path.suffix!r}",
                "type": "unsupported_format",
            }
            self._validation_errors.append(error)
            raise ConfigValidationError([error], str(file_path))

        data = self._read_file(file_path, FILE_TYPE_AGENCY_RATING)
        config = self._validate(AgencyRatingConfig, {"ratings": data}, file_path)
        return dict(config.ratings)

    def _read_file(self, file_path: Path, file_type: str) -> object:
        """Read a YAML or JSON file and record its checksum.

        Args:
            file_path: Path to the file.
            file_type: File type identifier for logging.

        Returns:
            Parsed content.

        Raises:
            ConfigValidationError: If parsing fails.
            FileNotFoundError: If file does not exist.
        """
        self._log.info(
            "loading_config_file",
            file_path=str(file_path),
            file_type=file_type,
        )
        try:
            content_bytes = file_path.read_bytes()
        except FileNotFoundError as e:
            self._log.error("config_file_not_found", error=str(e))
            raise

        checksum = hashlib.sha256(content_bytes).hexdigest()
        self._file_checksums[str(file_path.resolve())] = checksum

        content_str = content_bytes.decode("utf-8")
        try:
            if file_path.suffix.lower() == ".json":
                parsed: object = json.loads(content_str)
            else:
                parsed = yaml.safe_load(content_str)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            error = {"loc": "file", "msg": str(e), "type": "parse_error"}
            self._validation_errors.append(error)
            self._log.error(
                "config_parse_error", file_path=str(file_path), error=str(e)
            )
            raise ConfigValidationError([error], str(file_path)) from e

        self._log.info(
            "config_file_loaded",
            file_path=str(file_path),
            file_sha256=checksum,
        )
        return parsed if parsed is not None else {}

    def _validate(
        self,
        model: type[ModelT],
        data: object,
        file_path: Path,
    ) -> ModelT:
        """Validate parsed data against a schema.

        Args:
            model: Schema model class.
            data: Parsed file content.
            file_path: Path of the file, for error reporting.

        Returns:
            Validated model instance.

        Raises:
            ConfigValidationError: If validation fails.
        """
        start_time = time.perf_counter()
        try:
            return model.model_validate(data)
        except ValidationError as e:
            errors = [
                {
                    "loc": ".".join(str(loc) for loc in err["loc"]),
                    "msg": err["msg"],
                    "type": err["type"],
                }
                for err in e.errors()
            ]
            self._validation_errors.extend(errors)
            self._log.error(
                "config_validation_failed",
                file_path=str(file_path),
                validation_error_count=len(errors),
                errors=errors,
            )
            raise ConfigValidationError(errors, str(file_path)) from e
        finally:
            self._validation_duration_ms += (time.perf_counter() - start_time) * 1000

    def get_validation_summary(self) -> dict[str, object]:
        """Get a summary of the validation process.

        Returns:
            Dictionary with validation summary.
        """
        return {
            "run_id": self._run_id,
            "file_checksums": self._file_checksums,
            "validation_error_count": len(self._validation_errors),
            "validation_errors": self._validation_errors,
            "validation_duration_ms": self._validation_duration_ms,
        }
