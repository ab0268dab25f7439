"""
Tests for the Orchestrator package.

Covers:
- Named component list
- Composite ordering and failure semantics
- Command tree and flag binding
- Service supervision, exit codes and stop/kill escalation
"""
