"""Prompting package.

This package contains deterministic prompt-construction helpers used by the
provider adapters. It does not perform provider selection, transport or model
invocation.
"""
