"""
Slab Reader Errors
==================
Every failure the reader can hit while decoding a slab snapshot.

All of them are terminal for the call that raised them: a query either
returns a complete answer or raises. A failure in one call says nothing
about other calls on the same Slab whose path never touches the bad slot.
"""


class SlabError(Exception):
    """Base class for all slab decoding and navigation failures."""
    pass


class UninitializedSlotError(SlabError):
    """Raised when a slot carrying discriminant 0 is decoded."""
    pass


class UnrecognizedNodeTagError(SlabError):
    """Raised when a slot discriminant is outside the known tag set."""

    def __init__(self, tag: int):
        super().__init__(f"unrecognized node tag {tag}")
        self.tag = tag


class BufferUnderrunError(SlabError):
    """Raised when a slice is shorter than the field being read from it."""

    def __init__(self, what: str, needed: int, available: int):
        super().__init__(
            f"{what}: need {needed} bytes, only {available} available")
        self.needed = needed
        self.available = available


class StructuralCorruptionError(SlabError):
    """
    Raised when the tree reachable from the root is inconsistent with the
    header: a node other than Inner/Leaf inside the tree, a cycle (depth
    bound exceeded) or a leaf count that disagrees with the header.
    """
    pass
