"""Parameter catalog - Static descriptions of the reasoning protocol.

The catalog is descriptive metadata only. Nothing in the graph executes
these parameters; they are reported by initialize, summary and export.
"""

from __future__ import annotations

from dataclasses import dataclass

CATALOG_VERSION = "1.0.0"


@dataclass(frozen=True)
class ParameterSpec:
    """One protocol parameter.

    Attributes:
        key: Catalog key, ``P1_0`` through ``P1_29``.
        title: Short name.
        description: What the parameter stands for.
        active: Whether the parameter is reported as active.
    """

    key: str
    title: str
    description: str
    active: bool = True


PARAMETERS: tuple[ParameterSpec, ...] = (
    ParameterSpec(
        "P1_0",
        "Stage protocol",
        "Eight mandatory stages: initialization, decomposition, hypothesis/planning, "
        "evidence integration, pruning/merging, subgraph extraction, composition, reflection.",
    ),
    ParameterSpec(
        "P1_1",
        "Root node",
        "Root node n0 labelled 'Task Understanding' with a high multi-dimensional initial "
        "confidence and the full metadata schema.",
    ),
    ParameterSpec(
        "P1_2",
        "Default dimensions",
        "Scope, Objectives, Constraints, Data Needs, Use Cases, Potential Biases and "
        "Knowledge Gaps, each starting at confidence [0.8, 0.8, 0.8, 0.8].",
    ),
    ParameterSpec(
        "P1_3",
        "Hypothesis generation",
        "Three to five hypotheses per dimension, each with an explicit plan, disciplinary "
        "tags, falsification criteria, bias assessment and impact estimate.",
    ),
    ParameterSpec(
        "P1_4",
        "Evidence integration loop",
        "Iteratively link evidence to the most promising hypothesis and update its "
        "confidence, using typed edges, hyperedges, temporal decay and layers.",
    ),
    ParameterSpec(
        "P1_5",
        "Confidence vector",
        "Confidence = [empirical_support, theoretical_basis, methodological_rigor, "
        "consensus_alignment]; prune below 0.2 expected value with low impact, merge at "
        "semantic overlap >= 0.8.",
    ),
    ParameterSpec(
        "P1_6",
        "Output conventions",
        "Numeric node labels, verbatim queries in metadata, a reasoning trace appendix and "
        "claims annotated with node ids and edge types.",
    ),
    ParameterSpec(
        "P1_7",
        "Self-audit",
        "Check coverage of high-impact nodes, constraint adherence, bias flags, gaps, "
        "falsifiability, causal validity, temporal consistency, rigor and attribution.",
    ),
    ParameterSpec(
        "P1_8",
        "Disciplinary provenance",
        "Keep disciplinary_tags on every node; bridge nodes connect evidence and nodes with "
        "disjoint tags and enough semantic similarity.",
    ),
    ParameterSpec(
        "P1_9",
        "Hyperedges",
        "Hyperedges over more than two nodes capture joint, non-additive influence and carry "
        "their own confidence vector.",
    ),
    ParameterSpec(
        "P1_10",
        "Edge types",
        "Every edge carries edge_type: correlative, supportive, contradictory, prerequisite, "
        "generalization, specialization, causal, temporal or other.",
    ),
    ParameterSpec(
        "P1_11",
        "Graph state",
        "The graph state is (V, E with hyperedges, layers, node types, confidence, metadata, "
        "information metrics) with transition operators between stages.",
    ),
    ParameterSpec(
        "P1_12",
        "Metadata schema",
        "Nodes carry provenance, confidence, epistemic status, tags, falsification criteria, "
        "bias flags, revisions, layer, topology, power, info metrics, impact and attribution.",
    ),
    ParameterSpec(
        "P1_13",
        "Competing hypotheses",
        "Identify mutually exclusive hypotheses and plan critical experiments that maximize "
        "confidence divergence.",
    ),
    ParameterSpec(
        "P1_14",
        "Probabilistic confidence",
        "Confidence components are distributions updated by evidence reliability and edge "
        "type, with uncertainty propagation.",
    ),
    ParameterSpec(
        "P1_15",
        "Knowledge gaps",
        "Gap placeholder nodes flag high confidence variance or low connectivity and produce "
        "targeted research questions.",
    ),
    ParameterSpec(
        "P1_16",
        "Falsifiability",
        "Hypothesis nodes require falsification_criteria; missing criteria are penalized "
        "during pruning.",
    ),
    ParameterSpec(
        "P1_17",
        "Bias detection",
        "A Potential Biases dimension is mandatory and nodes carry bias_flags from an initial "
        "risk assessment.",
    ),
    ParameterSpec(
        "P1_18",
        "Temporal dynamics",
        "Timestamps drive evidence decay and confidence trend analysis.",
    ),
    ParameterSpec(
        "P1_19",
        "Intervention planning",
        "Prospective subgraphs are ranked by expected value of information and impact.",
    ),
    ParameterSpec(
        "P1_20",
        "Abstraction levels",
        "Nodes may encapsulate lower-level subgraphs with consistency links between levels.",
    ),
    ParameterSpec(
        "P1_21",
        "Computational budget",
        "Expensive operations are estimated and replaced by tagged approximations when over "
        "budget.",
    ),
    ParameterSpec(
        "P1_22",
        "Dynamic topology",
        "Restructure the graph from evidence patterns and keep centrality and clustering in "
        "topology_metrics.",
    ),
    ParameterSpec(
        "P1_23",
        "Multi-layer network",
        "Distinct interconnected layers for scales, disciplines or epistemologies, recorded "
        "in layer_id.",
    ),
    ParameterSpec(
        "P1_24",
        "Causal inference",
        "Causal edge semantics, counterfactual steps and confounders in causal_metadata.",
    ),
    ParameterSpec(
        "P1_25",
        "Temporal patterns",
        "Cycles, delays and sequences recorded in temporal_metadata.",
    ),
    ParameterSpec(
        "P1_26",
        "Statistical power",
        "Power, sample adequacy, effect size and intervals in statistical_power for evidence.",
    ),
    ParameterSpec(
        "P1_27",
        "Information theory",
        "Entropy, KL divergence, mutual information and MDL scores in info_metrics.",
    ),
    ParameterSpec(
        "P1_28",
        "Impact estimation",
        "Theoretical significance, practical utility and gap reduction combined into "
        "impact_score.",
    ),
    ParameterSpec(
        "P1_29",
        "Collaboration",
        "Attribution of nodes to researchers and expertise-based task allocation.",
    ),
)


def active_parameter_keys() -> list[str]:
    """Keys of all active parameters, in catalog order."""
    return [p.key for p in PARAMETERS if p.active]


def parameters_by_key() -> dict[str, ParameterSpec]:
    return {p.key: p for p in PARAMETERS}


__all__ = [
    "CATALOG_VERSION",
    "PARAMETERS",
    "ParameterSpec",
    "active_parameter_keys",
    "parameters_by_key",
]
