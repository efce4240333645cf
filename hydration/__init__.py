"""
Route-driven hydration engine

Pure, deterministic core that decides which server resources a page needs,
issues them as data-only commands and folds their responses back into one
coherent model.
"""

__version__ = "0.1.0"
