"""prdforge -- requirement-traced React project synthesis from PRD text."""

__version__ = "0.1.0"
