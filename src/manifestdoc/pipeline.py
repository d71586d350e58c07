"""Extraction pipeline: source units -> entities -> registry -> Markdown.

The run is a single synchronous fold over the source units in the order
given. A unit the readers cannot parse is logged and skipped; a duplicate
entity name ends the run.
"""

from __future__ import annotations

import dataclasses
import logging
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from .config import Settings
from .errors import DocumentationError, SourceParseError
from .extractors import extract
from .generators import generate_markdown
from .models import Entity, EntityKind, ResourceType, TypeExtension
from .parsers import LANGUAGE_BY_SUFFIX, READERS
from .registry import Registry
from .validators import ValidationResult, compute_coverage, validate_registry

log = logging.getLogger(__name__)


@dataclass
class SourceUnit:
    file: str
    text: str
    language: str  # "puppet" | "ruby"


@dataclass
class SkippedUnit:
    file: str
    reason: str


@dataclass
class ExtractionResult:
    """Everything one extraction fold produced, in discovery order."""

    entities: list[Entity] = field(default_factory=list)
    extensions: list[TypeExtension] = field(default_factory=list)
    skipped: list[SkippedUnit] = field(default_factory=list)
    unclaimed: int = 0  # Ruby statements no extractor recognized


@dataclass
class RunResult:
    markdown: str
    registry: Registry
    extraction: ExtractionResult
    validation: ValidationResult


def discover_sources(paths: Iterable[str | Path]) -> list[Path]:
    """Expand directories into their .pp and .rb files, sorted; keep files as given."""
    found: list[Path] = []
    for path in map(Path, paths):
        if path.is_dir():
            found.extend(
                sorted(p for p in path.rglob("*") if p.suffix in LANGUAGE_BY_SUFFIX and p.is_file())
            )
        else:
            found.append(path)
    return found


def read_units(paths: Iterable[Path]) -> tuple[list[SourceUnit], list[SkippedUnit]]:
    units: list[SourceUnit] = []
    skipped: list[SkippedUnit] = []
    for path in paths:
        language = LANGUAGE_BY_SUFFIX.get(path.suffix)
        if language is None:
            log.warning(f"Skipping {path}: not a .pp or .rb file")
            skipped.append(SkippedUnit(str(path), "unsupported file type"))
            continue
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            log.warning(f"Skipping {path}: {e}")
            skipped.append(SkippedUnit(str(path), str(e)))
            continue
        units.append(SourceUnit(str(path), text, language))
    return units, skipped


def extract_units(units: Iterable[SourceUnit]) -> ExtractionResult:
    result = ExtractionResult()
    for unit in units:
        try:
            nodes = READERS[unit.language](unit.text, unit.file)
        except SourceParseError as e:
            log.warning(f"Skipping {unit.file}: {e.reason} (line {e.line or '?'})")
            result.skipped.append(SkippedUnit(unit.file, str(e)))
            continue

        for node in nodes:
            item = extract(node)
            if item is None:
                result.unclaimed += 1
            elif isinstance(item, TypeExtension):
                result.extensions.append(item)
            else:
                result.entities.append(item)

    counts = Counter(e.kind.value for e in result.entities)
    log.info(
        "Extracted "
        + (", ".join(f"{n} {kind}" for kind, n in sorted(counts.items())) or "nothing")
    )
    return result


def _apply_extensions(entity: ResourceType, extensions: list[TypeExtension]) -> ResourceType:
    attributes = list(entity.attributes)
    known = {a.name for a in attributes}
    for ext in extensions:
        for attr in ext.attributes:
            if attr.name in known:
                log.warning(
                    f"{ext.file}:{ext.line}: {entity.name} already has an attribute "
                    f"'{attr.name}'; ignoring the later declaration"
                )
                continue
            known.add(attr.name)
            attributes.append(attr)
    return dataclasses.replace(entity, attributes=tuple(attributes))


def build_registry(result: ExtractionResult) -> Registry:
    """Insert extracted entities in discovery order.

    Raises:
        DuplicateNameError: If two entities of one kind share a name.
    """
    pending: dict[str, list[TypeExtension]] = defaultdict(list)
    for ext in result.extensions:
        pending[ext.type_name].append(ext)

    registry = Registry()
    for entity in result.entities:
        if isinstance(entity, ResourceType) and entity.name in pending:
            entity = _apply_extensions(entity, pending.pop(entity.name))
        registry.insert(entity)

    for type_name, exts in pending.items():
        for ext in exts:
            log.warning(f"{ext.file}:{ext.line}: attributes added to undeclared type '{type_name}'")
    return registry


def run(paths: Iterable[str | Path], settings: Settings) -> RunResult:
    """Extract, validate and render everything paths point at."""
    units, skipped = read_units(discover_sources(paths))
    extraction = extract_units(units)
    extraction.skipped[:0] = skipped
    registry = build_registry(extraction)
    validation = validate_registry(registry, strict=settings.strict)
    markdown = generate_markdown(registry, title=settings.title)
    return RunResult(markdown, registry, extraction, validation)


def document(paths: Iterable[str | Path], settings: Settings) -> str:
    """Render the Markdown reference for paths.

    Validation warnings are logged. In strict mode validation errors abort
    the run before anything is written.

    Raises:
        DuplicateNameError: If two entities of one kind share a name.
        DocumentationError: If strict validation fails.
    """
    result = run(paths, settings)

    for warning in result.validation.warnings:
        log.warning(warning)
    if result.validation.errors:
        for error in result.validation.errors:
            log.error(error)
        raise DocumentationError(result.validation.errors)

    coverage = compute_coverage(result.registry)
    present = [kind for kind in EntityKind if result.registry.all(kind)]
    if present:
        log.info(
            "Coverage: " + ", ".join(f"{kind.value} {coverage[kind.value]:.0%}" for kind in present)
        )
    if result.extraction.skipped:
        log.warning(f"Skipped {len(result.extraction.skipped)} source file(s)")
    return result.markdown
