from surfaces.splat_ellipsoid import SCALE_EPSILON
from utils.splat_tree import SplatTreeConfig


class SceneSettings:
    def __init__(self, scale_epsilon: float = SCALE_EPSILON, max_depth: float = 8, max_centers_per_node: float = 4) -> None:
        self.scale_epsilon: float = float(scale_epsilon)
        self.max_depth: int = int(max_depth)
        self.max_centers_per_node: int = int(max_centers_per_node)

    def tree_config(self) -> SplatTreeConfig:
        return SplatTreeConfig(max_depth=self.max_depth, max_centers_per_node=self.max_centers_per_node)
