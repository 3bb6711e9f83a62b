"""
Unit tests for record parsing and name normalisation.
"""

import unittest

from knowledge_graph.errors import MalformedField
from knowledge_graph.graph_types import Edge, EdgeType, NodeType
from knowledge_graph.records import (
    ListField, RawField, PaperRecord, parse_field, extract_array_field,
    normalize_name, make_node_id
)


class TestParseField(unittest.TestCase):
    """Test cases for the three record field shapes."""

    def test_native_list(self):
        parsed = parse_field(['graphene', ' carbon cloth ', '', None])
        self.assertIsInstance(parsed, ListField)
        self.assertEqual(parsed.as_list(), ['graphene', 'carbon cloth'])

    def test_json_encoded_list(self):
        parsed = parse_field('["Jane Doe", "John Smith"]')
        self.assertIsInstance(parsed, ListField)
        self.assertFalse(parsed.malformed)
        self.assertEqual(parsed.as_list(), ['Jane Doe', 'John Smith'])

    def test_json_encoded_scalar(self):
        self.assertEqual(extract_array_field('"graphene"'), ['graphene'])
        self.assertEqual(extract_array_field('42'), ['42'])

    def test_unparsable_json_is_single_value(self):
        parsed = parse_field('Geobacter sulfurreducens')
        self.assertIsInstance(parsed, RawField)
        self.assertTrue(parsed.malformed)
        self.assertIsInstance(parsed.error, MalformedField)
        self.assertEqual(parsed.as_list(), ['Geobacter sulfurreducens'])

    def test_broken_json_list_is_single_value(self):
        self.assertEqual(extract_array_field('["graphene", '), ['["graphene",'])

    def test_empty_values(self):
        for value in (None, '', '   ', [], 'null', '[]'):
            self.assertEqual(extract_array_field(value), [], f"value: {value!r}")

    def test_bare_scalar(self):
        self.assertEqual(extract_array_field(3.5), ['3.5'])


class TestNormalization(unittest.TestCase):
    """Test cases for node id derivation."""

    def test_case_and_whitespace_collapse(self):
        self.assertEqual(normalize_name('  Jane   Doe '), 'jane_doe')
        self.assertEqual(normalize_name('JANE\tDOE'), 'jane_doe')

    def test_make_node_id(self):
        self.assertEqual(make_node_id(NodeType.MATERIAL, 'Carbon  Cloth'), 'material_carbon_cloth')
        self.assertEqual(make_node_id('author', 'Jane Doe'),
                         make_node_id(NodeType.AUTHOR, 'jane doe'))


class TestPaperRecord(unittest.TestCase):
    """Test cases for record construction."""

    def test_from_camel_case_dict(self):
        record = PaperRecord.from_dict({
            'id': 'p1',
            'title': 'Paper A',
            'anodeMaterials': ['graphene'],
            'organismTypes': '["E. coli"]',
            'systemType': 'MFC',
            'unrelated': 'ignored',
        })
        self.assertEqual(record.id, 'p1')
        self.assertEqual(record.anode_materials, ['graphene'])
        self.assertEqual(record.organism_types, '["E. coli"]')
        self.assertEqual(record.system_type_label(), 'MFC')

    def test_coerce_rejects_other_types(self):
        with self.assertRaises(TypeError):
            PaperRecord.coerce(['not', 'a', 'record'])


class TestEdge(unittest.TestCase):
    """Test cases for edge strength validation."""

    def test_strength_is_clamped(self):
        edge = Edge('a', 'b', EdgeType.RELATED_TO, 1.6)
        self.assertEqual(edge.strength, 1.0)

    def test_non_positive_strength_rejected(self):
        for strength in (0, -0.5, float('nan')):
            with self.assertRaises(ValueError):
                Edge('a', 'b', EdgeType.RELATED_TO, strength)

    def test_edge_type_from_string(self):
        edge = Edge('a', 'b', 'cites', 0.3)
        self.assertIs(edge.type, EdgeType.CITES)


if __name__ == '__main__':
    unittest.main(verbosity=2)
