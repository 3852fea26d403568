"""impactlens - change impact analysis for single-file edits.

Given the current text of a file, impactlens resolves a baseline ("before")
version, works out which functions and classes changed their contract, finds
the files and tests that may be affected, and scores how safe the edit looks.
"""

from impactlens.engine import AnalysisResult, ImpactEngine

__version__ = "0.1.0"

__all__ = ["AnalysisResult", "ImpactEngine", "__version__"]
