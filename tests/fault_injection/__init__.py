"""Fault injection tests for the faultline fault model.

This package checks that the fault model keeps its invariants across any
sequence of crash and send-omission commands, and that injected faults have
the intended effect on a simulated cluster.

Key components:
- invariants.py: State and step invariant checks
- test_properties.py: Random and property-based command sequences
- test_omission_delivery.py: Message delivery under send omissions
"""
