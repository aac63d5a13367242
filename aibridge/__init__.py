"""
aibridge - pluggable LLM integration layer for host applications.

This package lets a host application exchange messages with a configurable
LLM backend: single-shot completions and multi-turn conversations in which
the model may call host-provided tools.
"""

__version__ = "0.1.0"
