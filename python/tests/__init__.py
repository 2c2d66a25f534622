"""
Test suite for note-index.

Test Categories:
- Unit tests: ternary tree, document store, query terms, record parser, settings
- Scenario tests: session lifecycle and the command protocol end to end
- CLI tests: argument handling, config files and statistics reporting
"""
