"""
Core algorithms for distance-based phylogenetic reconstruction.

Subpackages:
- distance: Jukes-Cantor pairwise distance estimation
- phylogeny: Neighbor-Joining and UPGMA tree construction
"""
