"""
Field Resolver

Main orchestrator for resolving a resource's fields:

Stage 1: Field Lineage - group every shape member by field name
Stage 2: Per-field resolution - type, slot, attribute unpacking, policies
Stage 3: Resource-wide flags - primary key, ARN, owner account ID
Stage 4: Listing columns

Resolution is a pure function of the shape graph and the overrides. Every
per-field error is recorded and resolution moves on, so one run reports
every problem; if any error was recorded, ResolutionFailed is raised and no
field set is returned.
"""

import logging
from dataclasses import replace
from typing import Optional, Union

from .classifier import (
    arn_patterns,
    assign_singleton_flag,
    check_slot_constraints,
    classify,
    decide_required,
    heuristic_slot,
    primary_key_patterns,
)
from .config import FieldConfig, GeneratorConfig, ResourceConfig
from .errors import FieldResolutionError, ResolutionFailed, UnknownField
from .lineage import resolve_lineage
from .policies import (
    attach_compare_policy,
    attach_late_init_policy,
    attach_present_policy,
    order_columns,
)
from .reconciler import reconcile_type
from .schema import (
    FIELD_NOT_IN_RESOURCE_SHAPES,
    HEURISTIC_OVERRIDDEN,
    MEMBER_DECOMPOSED,
    Diagnostic,
    FieldOccurrence,
    ResolvedField,
    ResolvedFieldSet,
    Severity,
    Slot,
)
from .shapes import ShapeGraph
from .unpacker import apply_attribute_unpacking

logger = logging.getLogger(__name__)


class FieldResolver:
    """
    Resolves every field of one resource.

    Each call to resolve() builds its own intermediate state; the graph and
    config are only read.
    """

    def __init__(
        self,
        graph: ShapeGraph,
        resource: str,
        config: Optional[ResourceConfig] = None,
    ):
        self.graph = graph
        self.resource = resource
        self.config = config or ResourceConfig()
        self.overrides: dict[str, FieldConfig] = dict(self.config.fields)

    def resolve(self) -> ResolvedFieldSet:
        """
        Run the full resolution.

        Returns:
            ResolvedFieldSet in declaration order

        Raises:
            ResolutionFailed: If any field could not be resolved
        """
        diagnostics: list[Diagnostic] = []
        errors: list[FieldResolutionError] = []
        logger.info(f"Resolving fields for {self.resource}")

        # Stage 1: Field Lineage
        logger.info("=== Stage 1: Field Lineage ===")
        lineage = resolve_lineage(self.graph, self.overrides)
        for parent, trigger in lineage.decomposed.items():
            diagnostics.append(Diagnostic(
                severity=Severity.INFO,
                code=MEMBER_DECOMPOSED,
                field=parent,
                message=f"flattened into prefixed member fields because {trigger} redirects into it",
            ))
        for name in lineage.unknown:
            self._fail(
                UnknownField(name, "override names a field with no lineage and no `from` redirect"),
                errors,
                diagnostics,
            )

        # Stage 2: Per-field resolution
        logger.info("=== Stage 2: Field Resolution ===")
        resolved: dict[str, ResolvedField] = {}
        for position, name in enumerate(lineage.names):
            field_diagnostics: list[Diagnostic] = []
            try:
                resolved[name] = self._resolve_field(
                    name,
                    position,
                    lineage.get(name),
                    self.overrides.get(name),
                    field_diagnostics,
                )
            except FieldResolutionError as e:
                self._fail(e, errors, diagnostics)
                continue
            diagnostics.extend(field_diagnostics)

        # Stage 3: Resource-wide flags
        logger.info("=== Stage 3: Resource-wide Flags ===")
        names = list(resolved.keys())
        ineligible = {name for name, f in resolved.items() if f.slot == Slot.IGNORED}
        singletons = (
            ("is_primary_key", primary_key_patterns(self.resource)),
            ("is_arn", arn_patterns(self.resource)),
            ("is_owner_account_id", set()),
        )
        for flag, patterns in singletons:
            try:
                assignment = assign_singleton_flag(flag, names, self.overrides, patterns, ineligible)
            except FieldResolutionError as e:
                self._fail(e, errors, diagnostics)
                continue
            for code, name, message in assignment.notes:
                diagnostics.append(Diagnostic(
                    severity=Severity.INFO, code=code, field=name, message=message,
                ))
            for name, decision in assignment.decisions.items():
                current = resolved[name]
                resolved[name] = replace(
                    current,
                    provenance=current.provenance + ((flag, decision.source),),
                    **{flag: decision.value},
                )
            if assignment.owner:
                logger.debug(f"{flag} -> {assignment.owner}")

        if errors:
            raise ResolutionFailed(self.resource, errors, diagnostics)

        # Stage 4: Listing columns
        logger.info("=== Stage 4: Listing Columns ===")
        fields = tuple(resolved.values())
        columns = order_columns(list(fields), self.config.print.order_by)

        logger.info(
            f"Resolved {len(fields)} field(s) for {self.resource}: "
            f"{sum(1 for f in fields if f.slot == Slot.SPEC)} spec, "
            f"{sum(1 for f in fields if f.slot == Slot.STATUS)} status, "
            f"{len(columns)} column(s)"
        )
        return ResolvedFieldSet(
            resource=self.resource,
            fields=fields,
            diagnostics=tuple(diagnostics),
            columns=columns,
            add_age_column=self.config.print.add_age_column,
        )

    def _resolve_field(
        self,
        name: str,
        position: int,
        occurrences: list[FieldOccurrence],
        override: Optional[FieldConfig],
        diagnostics: list[Diagnostic],
    ) -> ResolvedField:
        """Resolve one field; raises FieldResolutionError on failure."""
        type_ref = reconcile_type(self.graph, name, occurrences, override)

        slot = classify(name, occurrences, override)
        if occurrences:
            implied = heuristic_slot(occurrences)
            if slot.is_explicit and implied != slot.value:
                diagnostics.append(Diagnostic(
                    severity=Severity.INFO,
                    code=HEURISTIC_OVERRIDDEN,
                    field=name,
                    message=f"slot {implied.value} overridden to {slot.value.value}",
                ))
            elif not slot.is_explicit and slot.value == Slot.IGNORED:
                operations = sorted({o.operation for o in occurrences})
                diagnostics.append(Diagnostic(
                    severity=Severity.WARNING,
                    code=FIELD_NOT_IN_RESOURCE_SHAPES,
                    field=name,
                    message=(
                        f"only appears in {', '.join(operations)}; "
                        "not a Create input or Create/ReadOne output member"
                    ),
                ))

        check_slot_constraints(name, slot.value, override)
        required = decide_required(occurrences, override, slot.value)

        source_operation = None
        source_path = None
        if override is not None and override.source is not None:
            source_operation = override.source.operation
            source_path = override.source.path
        elif occurrences and occurrences[0].path != name:
            source_path = occurrences[0].path

        field = ResolvedField(
            name=name,
            slot=slot.value,
            type=type_ref,
            type_name=self.graph.describe(type_ref),
            is_secret=bool(override is not None and override.is_secret),
            is_immutable=bool(override is not None and override.is_immutable),
            is_required=required.value,
            source_operation=source_operation,
            source_path=source_path,
            position=position,
            provenance=(("slot", slot.source), ("is_required", required.source)),
        )

        if override is not None and override.is_attribute:
            field = apply_attribute_unpacking(field)

        field = replace(
            field,
            compare_policy=attach_compare_policy(field, override),
            present_policy=attach_present_policy(field, override),
            late_init_policy=attach_late_init_policy(field, override),
        )

        logger.debug(f"{name}: {field.slot.value} {field.type_name} ({slot.source.value})")
        return field

    @staticmethod
    def _fail(
        error: FieldResolutionError,
        errors: list[FieldResolutionError],
        diagnostics: list[Diagnostic],
    ) -> None:
        logger.error(f"[{error.code}] {error}")
        errors.append(error)
        diagnostics.append(Diagnostic(
            severity=Severity.ERROR,
            code=error.code,
            field=error.field,
            message=error.message,
        ))


def resolve_fields(
    graph: ShapeGraph,
    resource: str,
    config: Union[GeneratorConfig, ResourceConfig, None] = None,
) -> ResolvedFieldSet:
    """
    Convenience function to resolve a resource's fields.

    Args:
        graph: The shape graph
        resource: Resource name, e.g. "Function"
        config: Full generator config, one resource's config, or None

    Returns:
        ResolvedFieldSet

    Raises:
        ResolutionFailed: If any field could not be resolved
    """
    if isinstance(config, GeneratorConfig):
        config = config.resource(resource)
    resolver = FieldResolver(graph, resource, config)
    return resolver.resolve()
