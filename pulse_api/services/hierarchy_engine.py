"""
Territory hierarchy assembly and bottom-up metric roll-up.

Takes the flat rows of one reporting query, links them into an out-tree by
parent reference, and annotates every node with aggregated values:

- KPI percentages (coverage, calls, compliance, ...) are averaged over the
  node's direct children and rounded at every level.
- Additive quantities (mid-month product quantities) are summed.
- Per-product sales detail rows are grouped by product at the leaves and
  summed upward, with a scalar sales total per node.

The module performs no I/O. Rows come from the hierarchy repository and the
result is serialized straight into the HTTP response.
"""

import logging
import math
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Optional, Set, Tuple

from pulse_api.utils.errors import MalformedHierarchyError


logger = logging.getLogger(__name__)


DEFAULT_LEAF_ROLES: FrozenSet[str] = frozenset({"BE", "TE"})


class RollupMode(str, Enum):
    """How KPI metrics are averaged at manager nodes."""

    MEAN_OF_CHILDREN = "mean_of_children"  # Each direct child weighs the same
    LEAF_WEIGHTED = "leaf_weighted"  # Children weighted by leaves underneath


# =============================================================================
# Numeric helpers
# =============================================================================

def coerce_number(value: Any) -> float:
    """
    Convert a raw column value into a float.

    None, blanks, non-numeric strings, NaN and infinities all become 0.0 so
    that nothing downstream ever does arithmetic on a missing value.
    """
    if value is None:
        return 0.0

    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0

    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up, as the dashboards expect."""
    return int(math.floor(value + 0.5))


def _present(value: float) -> Any:
    """Render integral floats as ints in serialized output."""
    if float(value).is_integer():
        return int(value)
    return value


# =============================================================================
# Data Model
# =============================================================================

@dataclass
class OrgUnit:
    """One organizational unit as fetched from the datastore."""

    key: str
    parent_key: Optional[str] = None
    display_name: Optional[str] = None
    role_class: Optional[str] = None
    raw_metrics: Dict[str, Any] = field(default_factory=dict)
    leaf_detail_rows: List[Tuple[str, Any]] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def normalized_role(self) -> str:
        """Role code trimmed and upper-cased."""
        return (self.role_class or "").strip().upper()


@dataclass
class AggregationSchema:
    """Which metrics a hierarchy variant carries and how they roll up."""

    mean_metrics: Tuple[str, ...] = ()
    sum_metrics: Tuple[str, ...] = ()
    gate_by_role: bool = False
    leaf_roles: FrozenSet[str] = DEFAULT_LEAF_ROLES
    rollup_mode: RollupMode = RollupMode.MEAN_OF_CHILDREN
    track_details: bool = False

    @property
    def metric_names(self) -> Tuple[str, ...]:
        """All scalar metric names, averaged ones first."""
        return self.mean_metrics + self.sum_metrics

    def carries_raw_values(self, unit: OrgUnit) -> bool:
        """Whether a unit's own metrics and detail rows count at a leaf."""
        if not self.gate_by_role:
            return True
        return unit.normalized_role in self.leaf_roles


@dataclass
class HierarchyNode:
    """A node of the built tree; owns its children exclusively."""

    unit: OrgUnit
    children: Dict[str, "HierarchyNode"] = field(default_factory=dict)
    aggregated_metrics: Dict[str, float] = field(default_factory=dict)
    aggregated_detail_totals: Dict[str, float] = field(default_factory=dict)
    aggregated_scalar: float = 0.0
    leaf_count: int = 0

    @property
    def key(self) -> str:
        return self.unit.key

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def to_dict(self, schema: AggregationSchema) -> Dict[str, Any]:
        """Serialize this node and its subtree into a JSON-ready mapping."""
        payload: Dict[str, Any] = {
            "key": self.unit.key,
            "empName": self.unit.display_name,
            "role": self.unit.role_class,
        }
        payload.update(self.unit.extra)

        for name in schema.metric_names:
            payload[name] = _present(self.aggregated_metrics.get(name, 0.0))

        if schema.track_details:
            payload["products"] = {
                category: _present(total)
                for category, total in self.aggregated_detail_totals.items()
            }
            payload["totalSales"] = _present(self.aggregated_scalar)

        payload["children"] = {
            key: child.to_dict(schema) for key, child in self.children.items()
        }
        return payload


# =============================================================================
# Aggregation
# =============================================================================

def _aggregate_leaf(node: HierarchyNode, schema: AggregationSchema) -> None:
    unit = node.unit
    carries = schema.carries_raw_values(unit)

    for name in schema.metric_names:
        node.aggregated_metrics[name] = (
            coerce_number(unit.raw_metrics.get(name)) if carries else 0.0
        )

    totals: Dict[str, float] = {}
    if carries:
        for category, value in unit.leaf_detail_rows:
            totals[category] = totals.get(category, 0.0) + coerce_number(value)

    node.aggregated_detail_totals = totals
    node.aggregated_scalar = sum(totals.values())
    node.leaf_count = 1


def _rollup_mean(
    children: List[HierarchyNode],
    name: str,
    mode: RollupMode,
) -> int:
    if mode == RollupMode.LEAF_WEIGHTED:
        weight = sum(child.leaf_count for child in children)
        total = sum(
            child.aggregated_metrics.get(name, 0.0) * child.leaf_count
            for child in children
        )
    else:
        weight = len(children)
        total = sum(child.aggregated_metrics.get(name, 0.0) for child in children)

    if weight == 0:
        return 0
    return round_half_up(total / weight)


def _aggregate_manager(node: HierarchyNode, schema: AggregationSchema) -> None:
    children = list(node.children.values())
    node.leaf_count = sum(child.leaf_count for child in children)

    for name in schema.mean_metrics:
        node.aggregated_metrics[name] = float(
            _rollup_mean(children, name, schema.rollup_mode)
        )

    for name in schema.sum_metrics:
        node.aggregated_metrics[name] = sum(
            child.aggregated_metrics.get(name, 0.0) for child in children
        )

    totals: Dict[str, float] = {}
    for child in children:
        for category, value in child.aggregated_detail_totals.items():
            totals[category] = totals.get(category, 0.0) + value

    node.aggregated_detail_totals = totals
    node.aggregated_scalar = sum(totals.values())


# =============================================================================
# Tree Assembly
# =============================================================================

class _HierarchyIndex:
    """Key and parent-key indexes over one row set, built once."""

    def __init__(self, rows: Iterable[OrgUnit]):
        self.by_key: Dict[str, OrgUnit] = {}
        for unit in rows:
            self.by_key[unit.key] = unit

        self.children_of: Dict[str, List[str]] = defaultdict(list)
        for key, unit in self.by_key.items():
            if unit.parent_key and unit.parent_key in self.by_key:
                self.children_of[unit.parent_key].append(key)

    def top_level_keys(self) -> List[str]:
        """Keys whose parent is absent from the row set."""
        return [
            key
            for key, unit in self.by_key.items()
            if not unit.parent_key or unit.parent_key not in self.by_key
        ]


def _build_node(
    key: str,
    index: _HierarchyIndex,
    schema: AggregationSchema,
    visited: Set[str],
) -> HierarchyNode:
    if key in visited:
        raise MalformedHierarchyError(
            message=f"Hierarchy revisits unit '{key}'; parent references form a cycle",
            details={"key": key},
        )
    visited.add(key)

    node = HierarchyNode(unit=index.by_key[key])
    for child_key in index.children_of.get(key, ()):
        node.children[child_key] = _build_node(child_key, index, schema, visited)

    if node.is_leaf:
        _aggregate_leaf(node, schema)
    else:
        _aggregate_manager(node, schema)
    return node


def build_hierarchy(
    rows: Iterable[OrgUnit],
    root_key: Optional[str] = None,
    schema: Optional[AggregationSchema] = None,
) -> Dict[str, HierarchyNode]:
    """
    Build aggregated trees from a flat row set.

    Args:
        rows: Every unit fetched for the request
        root_key: Explicit root to build from; when None every unit whose
            parent is missing from the row set becomes a root
        schema: Metrics to roll up; defaults to an empty schema

    Returns:
        Mapping from root key to its fully aggregated node. Empty when there
        are no rows or the requested root is not among them.

    Raises:
        MalformedHierarchyError: If parent references form a cycle
    """
    schema = schema or AggregationSchema()
    index = _HierarchyIndex(rows)
    visited: Set[str] = set()
    roots: Dict[str, HierarchyNode] = {}

    if root_key is not None:
        if root_key in index.by_key:
            roots[root_key] = _build_node(root_key, index, schema, visited)
        else:
            logger.debug(f"Requested root '{root_key}' not among {len(index.by_key)} units")
        return roots

    for key in index.top_level_keys():
        roots[key] = _build_node(key, index, schema, visited)

    # Units never reached from a top-level key can only sit on a loop
    unreached = [key for key in index.by_key if key not in visited]
    if unreached:
        raise MalformedHierarchyError(
            message="Parent references form a cycle with no root",
            details={"keys": unreached},
        )

    logger.debug(f"Built {len(roots)} root(s) from {len(index.by_key)} units")
    return roots


def iter_nodes(node: HierarchyNode) -> Iterator[HierarchyNode]:
    """Yield a node and all of its descendants, parents first."""
    yield node
    for child in node.children.values():
        yield from iter_nodes(child)


def count_nodes(roots: Dict[str, HierarchyNode]) -> int:
    """Count every node across a set of roots."""
    return sum(1 for root in roots.values() for _ in iter_nodes(root))


def serialize(roots: Dict[str, HierarchyNode], schema: AggregationSchema) -> Dict[str, Any]:
    """Serialize built roots into nested mappings keyed by root key."""
    return {key: node.to_dict(schema) for key, node in roots.items()}


def compute(
    rows: Iterable[OrgUnit],
    root_key: Optional[str] = None,
    schema: Optional[AggregationSchema] = None,
) -> Dict[str, Any]:
    """Build the hierarchy and serialize every root into nested mappings."""
    schema = schema or AggregationSchema()
    return serialize(build_hierarchy(rows, root_key=root_key, schema=schema), schema)
