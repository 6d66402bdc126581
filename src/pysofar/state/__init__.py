"""State tree layer.

The poller writes into a hierarchical key/value tree: one container per
station and one typed leaf per station field. :class:`StateTree` is the
interface the projector depends on; :class:`MemoryStateTree` is the
bundled backend.
"""

from pysofar.state.objects import ContainerEntry, LeafEntry, StateValue
from pysofar.state.tree import MemoryStateTree, StateTree

__all__ = [
    "ContainerEntry",
    "LeafEntry",
    "MemoryStateTree",
    "StateTree",
    "StateValue",
]
