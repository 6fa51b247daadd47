"""
Contracts - handles, the handle cache, module resolution and the batch codec.
"""
