"""
Core components: format adapters, comment tree traversal and page assembly.
"""
