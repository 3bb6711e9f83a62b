"""Configuration constants for research knowledge graph construction."""

# Node seed weights (added again every time an entity is re-encountered)
PAPER_SEED_WEIGHT = 5.0
AUTHOR_SEED_WEIGHT = 2.0
MATERIAL_SEED_WEIGHT = 3.0
ORGANISM_SEED_WEIGHT = 3.0
CONCEPT_SEED_WEIGHT = 1.0
METHOD_SEED_WEIGHT = 2.0

# Edge strengths used by the layout attraction force
AUTHORED_STRENGTH = 1.0
USES_MATERIAL_STRENGTH = 0.8
STUDIES_ORGANISM_STRENGTH = 0.8
CONCEPT_STRENGTH = 0.5
METHOD_STRENGTH = 0.7

# Co-occurrence edges: strength = min(shared_papers * step, 1)
COOCCURRENCE_STRENGTH_STEP = 0.2
COOCCURRENCE_THRESHOLD = 1  # pairs must share more than this many papers

# Extraction limits
MAX_KEYWORDS = 3
MIN_KEYWORD_LENGTH = 4
MAX_NAME_LENGTH = 100
UNTITLED_PAPER_NAME = 'Untitled'

# Field values meaning "no data"; compared case-insensitively
UNSPECIFIED_VALUES = ('not specified', 'unknown', 'n/a', 'none')

# Rendering hints per node type
NODE_COLORS = {
    'paper': '#3B82F6',
    'author': '#10B981',
    'material': '#F59E0B',
    'organism': '#EF4444',
    'concept': '#8B5CF6',
    'method': '#EC4899',
}

NODE_BASE_SIZES = {
    'paper': 8,
    'author': 6,
    'material': 7,
    'organism': 7,
    'concept': 4,
    'method': 5,
}
