"""
LingoVault smart import: turn pasted vocabulary data plus an AI-authored
import plan into deduplicated word entries.
"""

__version__ = "1.4.0"
