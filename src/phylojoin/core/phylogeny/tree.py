"""
Binary phylogenetic tree stored as an arena of nodes.

Nodes are addressed by stable integer indices. Leaves are added first, one
per taxon, and every join appends one internal node that owns exactly two
previously parentless nodes. The index of each node matches the row it
occupies in the clustering matrix, so the tree and the matrix grow in
lockstep.
"""

from __future__ import annotations

from dataclasses import dataclass

from phylojoin.core.constants import NEWICK_DECIMALS


@dataclass(frozen=True)
class TreeNode:
    """A leaf or an internal node of the tree.

    Attributes:
        index: Position of this node in the arena.
        name: Taxon name for leaves, None for internal nodes.
        children: Indices of the (left, right) children, None for leaves.
        branch_lengths: Lengths of the edges to (left, right) children.
        height: Distance above the leaves (UPGMA); 0.0 when not tracked.
        size: Number of leaves beneath this node.
    """

    index: int
    name: str | None = None
    children: tuple[int, int] | None = None
    branch_lengths: tuple[float, float] | None = None
    height: float = 0.0
    size: int = 1

    @property
    def is_leaf(self) -> bool:
        return self.children is None


class Tree:
    """
    Strictly binary tree built bottom-up by successive joins.

    Example:
        >>> tree = Tree()
        >>> a, b = tree.add_leaf("A"), tree.add_leaf("B")
        >>> root = tree.join(a, b, 0.1, 0.2)
        >>> tree.to_newick()
        '(A:0.100000,B:0.200000);'
    """

    def __init__(self) -> None:
        self._nodes: list[TreeNode] = []
        self._parents: list[int | None] = []
        self._n_internal = 0

    def add_leaf(self, name: str) -> int:
        """Append a leaf for a taxon and return its index."""
        if not name:
            msg = "Leaf name must be non-empty"
            raise ValueError(msg)
        if self._n_internal:
            msg = "Leaves must be added before any join"
            raise ValueError(msg)
        index = len(self._nodes)
        self._nodes.append(TreeNode(index=index, name=name))
        self._parents.append(None)
        return index

    def join(
        self,
        left: int,
        right: int,
        branch_left: float,
        branch_right: float,
        height: float = 0.0,
    ) -> int:
        """
        Create an internal node over two parentless nodes.

        Branch lengths are stored as given; negative values are legitimate
        results of Neighbor-Joining and are not clamped.

        Args:
            left: Index of the left child.
            right: Index of the right child.
            branch_left: Length of the edge to the left child.
            branch_right: Length of the edge to the right child.
            height: Height of the new node above the leaves.

        Returns:
            Index of the new internal node.

        Raises:
            ValueError: If a child does not exist, is already owned by a
                parent, or both children are the same node.
        """
        if left == right:
            msg = f"Cannot join node {left} with itself"
            raise ValueError(msg)
        for child in (left, right):
            if not 0 <= child < len(self._nodes):
                msg = f"Unknown node index: {child}"
                raise ValueError(msg)
            if self._parents[child] is not None:
                msg = f"Node {child} already has parent {self._parents[child]}"
                raise ValueError(msg)

        index = len(self._nodes)
        self._nodes.append(
            TreeNode(
                index=index,
                children=(left, right),
                branch_lengths=(branch_left, branch_right),
                height=height,
                size=self._nodes[left].size + self._nodes[right].size,
            )
        )
        self._parents.append(None)
        self._n_internal += 1
        self._parents[left] = index
        self._parents[right] = index
        return index

    def __len__(self) -> int:
        """Total number of nodes (leaves and internal)."""
        return len(self._nodes)

    def node(self, index: int) -> TreeNode:
        return self._nodes[index]

    @property
    def nodes(self) -> tuple[TreeNode, ...]:
        return tuple(self._nodes)

    @property
    def leaves(self) -> list[TreeNode]:
        return [node for node in self._nodes if node.is_leaf]

    @property
    def leaf_names(self) -> list[str]:
        """Taxon names in leaf creation order."""
        return [node.name for node in self._nodes if node.is_leaf]

    @property
    def n_leaves(self) -> int:
        return len(self._nodes) - self._n_internal

    @property
    def is_complete(self) -> bool:
        """True once all nodes hang below a single root."""
        return len(self._nodes) > 0 and sum(p is None for p in self._parents) == 1

    @property
    def root(self) -> int:
        """Index of the root node.

        Raises:
            ValueError: If the tree still has more than one parentless node.
        """
        if not self.is_complete:
            msg = "Tree is not complete: more than one parentless node remains"
            raise ValueError(msg)
        return self._parents.index(None)

    def parent(self, index: int) -> int | None:
        return self._parents[index]

    def root_to_tip_distances(self) -> dict[str, float]:
        """
        Sum of branch lengths from the root to every leaf.

        Returns:
            Mapping of taxon name to path length.
        """
        distances: dict[str, float] = {}
        stack: list[tuple[int, float]] = [(self.root, 0.0)]
        while stack:
            index, depth = stack.pop()
            node = self._nodes[index]
            if node.is_leaf:
                distances[node.name] = depth
                continue
            (left, right), (bl, br) = node.children, node.branch_lengths
            stack.append((right, depth + br))
            stack.append((left, depth + bl))
        return distances

    def to_newick(self, decimals: int = NEWICK_DECIMALS) -> str:
        """
        Serialize the tree in Newick format.

        A leaf renders as its name; an internal node renders as
        '(<left>:<length>,<right>:<length>)' with fixed-precision lengths.
        The output ends with ';' and has no trailing newline.

        Args:
            decimals: Digits after the decimal point for branch lengths.

        Returns:
            Newick string.
        """
        # Iterative post-order so caterpillar trees of a few thousand leaves
        # stay clear of the recursion limit
        rendered: dict[int, str] = {}
        stack: list[tuple[int, bool]] = [(self.root, False)]
        while stack:
            index, expanded = stack.pop()
            node = self._nodes[index]
            if node.is_leaf:
                rendered[index] = node.name
                continue
            left, right = node.children
            if not expanded:
                stack.append((index, True))
                stack.append((right, False))
                stack.append((left, False))
                continue
            bl, br = node.branch_lengths
            rendered[index] = (
                f"({rendered.pop(left)}:{bl:.{decimals}f},"
                f"{rendered.pop(right)}:{br:.{decimals}f})"
            )
        return rendered[self.root] + ";"
