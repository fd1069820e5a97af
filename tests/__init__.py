"""
Route Optimizer Test Suite

Test Organization:
- unit/: graph store, routing engine, traffic service, planner, loader, client
- integration/: HTTP contract, concurrent updates, command line

To run all tests:
    python -m pytest tests/
"""
