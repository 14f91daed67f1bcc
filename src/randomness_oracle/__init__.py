"""Server-signed randomness oracle for on-chain blackjack tables."""

__version__ = "0.1.0"
