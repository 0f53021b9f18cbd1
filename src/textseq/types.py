"""
Core types for sequence encoding.
"""

type Token = str
type TokenId = int
type Document = list[Token]
type EncodedSequence = list[TokenId]
