"""Documentation validation and quality checks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from .models import (
    DefinedType,
    Documented,
    Entity,
    EntityKind,
    Function4x,
    Parameter,
    PuppetClass,
    PuppetFunction,
    TagKind,
)
from .registry import Registry

SUMMARY_MAX_LENGTH = 140


@dataclass
class ValidationResult:
    """Results from documentation validation."""

    errors: list[str] = field(default_factory=list)  # Run fails if non-empty
    warnings: list[str] = field(default_factory=list)  # Logged but allowed


def _documented_parts(entity: Entity) -> Iterator[tuple[str, Documented, tuple[Parameter, ...]]]:
    """Yield (label, docs, parameters) for every independently documented part."""
    if isinstance(entity, Function4x):
        for overload in entity.overloads:
            label = entity.name if len(entity.overloads) == 1 else f"{entity.name}/{overload.name}"
            yield label, overload, overload.parameters
    elif isinstance(entity, (PuppetClass, DefinedType, PuppetFunction)):
        yield entity.name, entity, entity.parameters
    else:
        yield entity.qualified_name, entity, ()


def is_documented(entity: Entity) -> bool:
    return any(doc.overview or doc.summary for _, doc, _ in _documented_parts(entity))


def validate_registry(registry: Registry, strict: bool = False) -> ValidationResult:
    """Validate extracted documentation.

    Checks:
    1. Entities should have an overview or @summary (warning, error in strict mode)
    2. @summary should fit on one line of a table of contents (warning)
    3. Every declared parameter should have a @param tag, and every @param
       tag should name a declared parameter (warning)

    Args:
        registry: Populated registry
        strict: If True, undocumented entities are errors instead of warnings

    Returns:
        ValidationResult with errors and warnings
    """
    result = ValidationResult()

    for entity in registry:
        if not is_documented(entity):
            msg = f"{entity.qualified_name}: missing overview or @summary (undocumented)"
            if strict:
                result.errors.append(msg)
            else:
                result.warnings.append(msg)

        for label, doc, params in _documented_parts(entity):
            if doc.summary and len(doc.summary) > SUMMARY_MAX_LENGTH:
                result.warnings.append(
                    f"{label}: @summary is longer than {SUMMARY_MAX_LENGTH} characters"
                )
            if isinstance(entity, (PuppetClass, DefinedType, PuppetFunction, Function4x)):
                declared = {p.name for p in params}
                tagged = [t.subject for t in doc.tags_of(TagKind.PARAM)]
                for p in params:
                    if p.name not in tagged:
                        result.warnings.append(f"{label}: missing @param tag for '{p.name}'")
                for name in tagged:
                    if name not in declared:
                        shown = name or "(no name)"
                        result.warnings.append(f"{label}: @param tag {shown} has no matching parameter")

    return result


def compute_coverage(registry: Registry) -> dict[str, float]:
    """Compute documentation coverage by entity kind.

    Returns:
        Dict of kind name to coverage (0.0 - 1.0); kinds with no entities are 1.0
    """
    coverage: dict[str, float] = {}
    for kind in EntityKind:
        entities = registry.all(kind)
        documented = sum(1 for e in entities if is_documented(e))
        coverage[kind.value] = documented / len(entities) if entities else 1.0
    return coverage
