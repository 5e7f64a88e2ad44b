"""Provider-agnostic prompting over hosted and local language models."""

from oracle.errors import (
    BadRequestError,
    CapabilityError,
    ClientError,
    ConfigError,
    EmptyResponseError,
    HistoryMismatchError,
    OracleError,
    RateLimitError,
    ResponseDecodeError,
    UnprocessableReferenceError,
)
from oracle.oracle import Oracle
from oracle.prompt import Prompt
from oracle.references import File, Folder, Image, Reference, ReferenceKind, classify

__all__ = [
    "BadRequestError",
    "CapabilityError",
    "ClientError",
    "ConfigError",
    "EmptyResponseError",
    "File",
    "Folder",
    "HistoryMismatchError",
    "Image",
    "Oracle",
    "OracleError",
    "Prompt",
    "RateLimitError",
    "Reference",
    "ReferenceKind",
    "ResponseDecodeError",
    "UnprocessableReferenceError",
    "classify",
]
