# =============================================================================
# Document Container Backup Library
# =============================================================================
# Paginated, concurrency-controlled copy/clean engine for document containers.
# See individual sub-packages for detailed documentation.
# =============================================================================

"""
Document container backup library.

Sub-packages:
- models: Pydantic run options, query specs and summaries
- engine: Cursor source, stats, document pipeline, page scheduler, job controller
"""

__version__ = "0.1.0"
