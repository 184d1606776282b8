"""
Faction Graph Engine

Core of an interactive conflict-event dashboard: builds the faction
relationship graph from violent events, classifies relationships,
windows events in time, computes focus subgraphs and runs the view
state machine. Each layer communicates only through the immutable
contracts in contracts/.

LAYER STRUCTURE:
================

1. INGESTION LAYER (ingestion/)
   - Responsibility: Read CSV/JSON exports, coerce rows to ConflictEvent
   - Outputs: ConflictEvent (immutable)
   - MUST NOT: Extract factions, aggregate, raise on partial rows

2. NORMALIZATION LAYER (normalization/)
   - Responsibility: Split side fields into faction names, drop civilians
   - Outputs: Sets of faction names
   - MUST NOT: Count or classify anything

3. CORE GRAPH LAYER (core/)
   - Responsibility: Aggregation, graph build, focus sets, country rollups
   - Outputs: FactionGraph, VisibilityDiff, CountryAggregate
   - MUST NOT: Hold view state, position or draw nodes

4. TEMPORAL & INTERACTION STATE (temporal/)
   - Responsibility: Time window, rate limiting, view-state transitions
   - Outputs: Windowed events, ViewState, StateChange
   - MUST NOT: Mutate ViewState outside the ViewStateMachine store

5. GEO & LAYOUT COLLABORATORS (geo/, layout/)
   - Responsibility: Country-name matching, force parameters, warm-up
   - MUST NOT: Raise on unmatched names, decide visibility

6. READ API (api/)
   - Responsibility: GET-only HTTP access to the engine
   - MUST NOT: Change engine state

7. OBSERVABILITY (observability/)
   - Responsibility: Logging setup
   - MUST NOT: Modify system behavior

CONSTRAINTS ENFORCED:
=====================
- Immutability-first: events, graphs and view states are frozen
- Deterministic: identical inputs always produce equal graphs
- Explicit errors: lookup misses are logged failures, never exceptions
"""

__version__ = "0.1.0"
