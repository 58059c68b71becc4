"""
Exception hierarchy for dataset preparation.

Input, config and manifest errors abort a run. Decode, transform and encode errors
are per image: the pipeline catches them inside the worker and skips the file.
"""


class DatasetPrepError(Exception):
    """Base class for all dataset-prep errors."""


class ConfigError(DatasetPrepError):
    """Invalid configuration (resize format, rotate angle, flip mode, YAML)."""


class InputError(DatasetPrepError):
    """Input root is missing, is not a directory, or collides with the output root."""


class EmptyInputError(DatasetPrepError):
    """No classes or images were found under the input root."""


class DecodeError(DatasetPrepError):
    """Source file could not be read or is not a supported image."""


class TransformError(DatasetPrepError):
    """Decoded image could not be transformed (unsupported dtype or layout)."""


class EncodeError(DatasetPrepError):
    """Transformed image could not be encoded or written."""


class WriteError(DatasetPrepError):
    """Manifest file could not be written."""
