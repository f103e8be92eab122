"""NurtureTalk - NGO assistant with retrieval-augmented conversational memory."""

__version__ = "0.1.0"
