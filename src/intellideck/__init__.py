"""
IntelliDeck: flashcard study sets with adaptive study modes and AI-assisted card generation.
"""
__version__ = "1.0.0"
