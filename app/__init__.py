"""
                Restaurant Ordering API

Menu catalog (static or LLM-generated), transactional order submission and a
retrieval-augmented menu assistant behind a FastAPI service.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
