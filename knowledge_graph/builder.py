"""
Knowledge graph construction from bibliographic paper records.

This module collapses noisy, semi-structured record fields into a
deduplicated set of typed nodes and weighted edges, then densifies the
graph with co-occurrence links between materials (and organisms) that
appear together in several papers.
"""

import warnings
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from .config import (
    AUTHORED_STRENGTH, USES_MATERIAL_STRENGTH, STUDIES_ORGANISM_STRENGTH,
    CONCEPT_STRENGTH, METHOD_STRENGTH, COOCCURRENCE_STRENGTH_STEP,
    COOCCURRENCE_THRESHOLD, MAX_KEYWORDS, MIN_KEYWORD_LENGTH,
    MAX_NAME_LENGTH, UNTITLED_PAPER_NAME, UNSPECIFIED_VALUES
)
from .errors import InvalidConfig
from .graph_types import Edge, EdgeType, Graph, Node, NodeType
from .records import PaperRecord, make_node_id, normalize_name


@dataclass
class BuilderConfig:
    """Configuration for entity extraction and edge synthesis."""
    max_keywords: int = MAX_KEYWORDS
    min_keyword_length: int = MIN_KEYWORD_LENGTH
    cooccurrence_threshold: int = COOCCURRENCE_THRESHOLD
    cooccurrence_step: float = COOCCURRENCE_STRENGTH_STEP
    link_organisms: bool = True
    unspecified_values: Tuple[str, ...] = UNSPECIFIED_VALUES
    max_name_length: int = MAX_NAME_LENGTH
    warn_on_malformed: bool = False

    def validate(self):
        if self.max_keywords < 0:
            raise InvalidConfig(f"max_keywords must be >= 0, got {self.max_keywords}")
        if self.min_keyword_length < 0:
            raise InvalidConfig(f"min_keyword_length must be >= 0, got {self.min_keyword_length}")
        if self.cooccurrence_threshold < 0:
            raise InvalidConfig(
                f"cooccurrence_threshold must be >= 0, got {self.cooccurrence_threshold}")
        if not self.cooccurrence_step > 0:
            raise InvalidConfig(f"cooccurrence_step must be positive, got {self.cooccurrence_step}")
        if self.max_name_length <= 0:
            raise InvalidConfig(f"max_name_length must be positive, got {self.max_name_length}")

    def select_keywords(self, keywords: List[str]) -> List[str]:
        """Keywords that become concept nodes: the leading few that are long enough."""
        return [keyword for keyword in keywords[:self.max_keywords]
                if len(normalize_name(keyword)) >= self.min_keyword_length]


@dataclass
class BuildReport:
    """Counts of recovered data problems from the last build."""
    records: int = 0
    malformed_fields: int = 0
    skipped_values: int = 0
    duplicate_edges: int = 0
    dropped_edges: int = 0


@dataclass
class _BuildState:
    nodes: Dict[str, Node] = field(default_factory=dict)
    edges: List[Edge] = field(default_factory=list)
    edge_keys: Set[Tuple[str, str, str]] = field(default_factory=set)
    # entity id -> paper ids in first-seen order
    entity_papers: Dict[str, List[str]] = field(default_factory=dict)


class KnowledgeGraphBuilder:
    """
    Build typed entity-relationship graphs from paper records.

    Every call to ``build`` starts from an empty graph; nothing is carried
    between calls except the ``report`` of the most recent build.
    """

    def __init__(self, config: Optional[BuilderConfig] = None, verbose: bool = False):
        self.config = config if config is not None else BuilderConfig()
        self.config.validate()
        self.verbose = verbose
        self.report = BuildReport()
        self._unspecified = {normalize_name(value) for value in self.config.unspecified_values}

    def build(self, records: Iterable[Any]) -> Graph:
        """
        Build a graph from paper records.

        Args:
            records: PaperRecord instances or mappings with record fields

        Returns:
            Graph with deduplicated nodes and edges
        """
        state = _BuildState()
        self.report = BuildReport()

        for index, raw_record in enumerate(records):
            record = PaperRecord.coerce(raw_record)
            self._add_record(state, record, index)
            self.report.records += 1

        self._add_cooccurrence_edges(state, NodeType.MATERIAL)
        if self.config.link_organisms:
            self._add_cooccurrence_edges(state, NodeType.ORGANISM)

        edges = self._drop_dangling_edges(state)
        graph = Graph(nodes=list(state.nodes.values()), edges=edges)

        if self.verbose:
            print(f"Built knowledge graph from {self.report.records} records")
            print(f"  Nodes: {len(graph.nodes)}, Edges: {len(graph.edges)}")
            if self.report.malformed_fields or self.report.skipped_values:
                print(f"  Malformed fields: {self.report.malformed_fields}, "
                      f"skipped values: {self.report.skipped_values}")

        return graph

    def _add_record(self, state: _BuildState, record: PaperRecord, index: int):
        parsed = record.parsed_fields()
        for name, value in parsed.items():
            if value.malformed:
                self.report.malformed_fields += 1
                if self.config.warn_on_malformed:
                    warnings.warn(f"Record {index} field '{name}': {value.error}")

        paper_id = self._paper_id(record, index)
        metadata = {
            key: value for key, value in (
                ('paper_id', record.id),
                ('doi', record.doi),
                ('journal', record.journal),
                ('publication_date', record.publication_date),
                ('system_type', record.system_type_label()),
            ) if value is not None
        }
        title = str(record.title).strip() if record.title is not None else ''
        self._add_node(state, paper_id, title or UNTITLED_PAPER_NAME, NodeType.PAPER, metadata)

        # Entities already counted for this record; repeats within one record add no weight
        seen = {paper_id}

        for author in parsed['authors'].as_list():
            author_id = self._add_entity(state, NodeType.AUTHOR, author, seen)
            if author_id is not None:
                self._add_edge(state, author_id, paper_id, EdgeType.AUTHORED, AUTHORED_STRENGTH)

        anode_materials = parsed['anode_materials'].as_list()
        cathode_materials = parsed['cathode_materials'].as_list()
        anode_ids = {make_node_id(NodeType.MATERIAL, m) for m in anode_materials}
        cathode_ids = {make_node_id(NodeType.MATERIAL, m) for m in cathode_materials}
        for material in anode_materials + cathode_materials:
            material_id = make_node_id(NodeType.MATERIAL, material)
            metadata = {}
            if material_id in anode_ids:
                metadata['is_anode'] = True
            if material_id in cathode_ids:
                metadata['is_cathode'] = True
            material_id = self._add_entity(state, NodeType.MATERIAL, material, seen, metadata)
            if material_id is not None:
                self._add_edge(state, paper_id, material_id, EdgeType.USES_MATERIAL,
                               USES_MATERIAL_STRENGTH)
                self._record_paper(state, material_id, paper_id)

        for organism in parsed['organism_types'].as_list():
            organism_id = self._add_entity(state, NodeType.ORGANISM, organism, seen)
            if organism_id is not None:
                self._add_edge(state, paper_id, organism_id, EdgeType.STUDIES_ORGANISM,
                               STUDIES_ORGANISM_STRENGTH)
                self._record_paper(state, organism_id, paper_id)

        for keyword in self.config.select_keywords(parsed['keywords'].as_list()):
            concept_id = self._add_entity(state, NodeType.CONCEPT, keyword, seen)
            if concept_id is not None:
                self._add_edge(state, paper_id, concept_id, EdgeType.RELATED_TO, CONCEPT_STRENGTH)

        system_type = record.system_type_label()
        if system_type is not None:
            method_id = self._add_entity(state, NodeType.METHOD, system_type, seen)
            if method_id is not None:
                self._add_edge(state, paper_id, method_id, EdgeType.RELATED_TO, METHOD_STRENGTH)

    def _paper_id(self, record: PaperRecord, index: int) -> str:
        if record.id is not None and normalize_name(record.id):
            return make_node_id(NodeType.PAPER, str(record.id))
        if record.title is not None and normalize_name(record.title):
            return make_node_id(NodeType.PAPER, str(record.title))
        return make_node_id(NodeType.PAPER, f"untitled {index}")

    def _is_unspecified(self, value: str) -> bool:
        return normalize_name(value) in self._unspecified

    def _add_entity(self, state: _BuildState, node_type: NodeType, name: str,
                    seen: Set[str], metadata: Optional[Dict[str, Any]] = None) -> Optional[str]:
        if self._is_unspecified(name) or not normalize_name(name):
            self.report.skipped_values += 1
            return None

        node_id = make_node_id(node_type, name)
        if node_id in seen:
            return node_id
        seen.add(node_id)
        self._add_node(state, node_id, name, node_type, metadata)
        return node_id

    def _add_node(self, state: _BuildState, node_id: str, name: str, node_type: NodeType,
                  metadata: Optional[Dict[str, Any]] = None):
        node = state.nodes.get(node_id)
        if node is None:
            state.nodes[node_id] = Node(
                id=node_id,
                name=name.strip()[:self.config.max_name_length],
                type=node_type,
                weight=node_type.seed_weight,
                metadata=dict(metadata or {}),
            )
            return

        node.weight += node_type.seed_weight
        for key, value in (metadata or {}).items():
            # Flags such as is_anode accumulate; other metadata keeps the first value
            if isinstance(value, bool):
                node.metadata[key] = node.metadata.get(key, False) or value
            else:
                node.metadata.setdefault(key, value)

    def _add_edge(self, state: _BuildState, source: str, target: str,
                  edge_type: EdgeType, strength: float):
        if source == target:
            return
        key = (source, target, edge_type.value)
        if key in state.edge_keys:
            self.report.duplicate_edges += 1
            return
        state.edge_keys.add(key)
        state.edges.append(Edge(source, target, edge_type, strength))

    def _record_paper(self, state: _BuildState, entity_id: str, paper_id: str):
        papers = state.entity_papers.setdefault(entity_id, [])
        if paper_id not in papers:
            papers.append(paper_id)

    def _add_cooccurrence_edges(self, state: _BuildState, node_type: NodeType):
        """Link entity pairs that share more than ``cooccurrence_threshold`` papers."""
        entity_ids = [node.id for node in state.nodes.values() if node.type == node_type]
        added = 0

        for i, first_id in enumerate(entity_ids):
            first_papers = set(state.entity_papers.get(first_id, ()))
            if len(first_papers) <= self.config.cooccurrence_threshold:
                continue
            for second_id in entity_ids[i + 1:]:
                shared = len(first_papers.intersection(state.entity_papers.get(second_id, ())))
                if shared > self.config.cooccurrence_threshold:
                    strength = min(shared * self.config.cooccurrence_step, 1.0)
                    before = len(state.edges)
                    self._add_edge(state, first_id, second_id, EdgeType.RELATED_TO, strength)
                    added += len(state.edges) - before

        if self.verbose and added:
            print(f"  Added {added} {node_type.value} co-occurrence edges")

    def _drop_dangling_edges(self, state: _BuildState) -> List[Edge]:
        kept = []
        for edge in state.edges:
            if edge.source in state.nodes and edge.target in state.nodes:
                kept.append(edge)
            else:
                self.report.dropped_edges += 1
        return kept


def build_graph(records: Iterable[Any],
                config: Optional[BuilderConfig] = None,
                verbose: bool = False) -> Graph:
    """
    Build a knowledge graph directly from records.

    Args:
        records: PaperRecord instances or record mappings
        config: Optional builder configuration
        verbose: Print a short build summary

    Returns:
        Graph instance
    """
    builder = KnowledgeGraphBuilder(config=config, verbose=verbose)
    return builder.build(records)
