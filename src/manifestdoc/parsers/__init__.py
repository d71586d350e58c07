"""Source readers that turn manifest and Ruby text into declaration nodes."""

from .puppet import read_manifest
from .ruby import read_ruby

READERS = {
    "puppet": read_manifest,
    "ruby": read_ruby,
}

LANGUAGE_BY_SUFFIX = {
    ".pp": "puppet",
    ".rb": "ruby",
}

__all__ = [
    "LANGUAGE_BY_SUFFIX",
    "READERS",
    "read_manifest",
    "read_ruby",
]
