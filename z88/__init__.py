"""
Z-88 Creative Engine
Multi-LLM cyberpunk story generation by the Helix Collective agents.
"""

__version__ = "0.1.0"
