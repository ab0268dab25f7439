"""
Test suites for the lifecycle layer.

Sub-packages mirror the source packages:
- core: context, logging, exceptions
- orchestrator: registry, composite, command tree, service
- components: standard components
"""
