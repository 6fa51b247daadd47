"""
Interfaces - ABI helpers and the per-chain module registry.
"""
