# region Imports
import numpy as np
import matplotlib.pyplot as plt
from matplotlib.collections import LineCollection
from matplotlib.lines import Line2D
from matplotlib.patches import Patch
# endregion


# region Extent
def grid_extent(spec):
    """imshow extent (left, right, bottom, top) with nodes at cell centers."""
    half_x = (0.5 - spec.node_offset) * spec.x_inc
    half_y = (0.5 - spec.node_offset) * spec.y_inc
    return [spec.x_min - half_x, spec.x_max + half_x, spec.y_min - half_y, spec.y_max + half_y]
# endregion


# region Mesh Plot
def show_mesh(
    points,
    triangles,
    grid=None,
    voronoi=None,
    title="Delaunay triangulation",
    show=True,
):
    """
    Render the triangulation over the gridded surface (if any), with
    optional Voronoi edges. Returns (fig, ax).
    """
    fig, ax = plt.subplots(figsize=(8, 8))

    # region Grid Underlay
    if grid is not None:
        img = ax.imshow(np.ma.masked_invalid(grid.data), origin="upper", cmap="terrain",
                        alpha=0.9, extent=grid_extent(grid.spec))
        cbar = fig.colorbar(img, ax=ax, fraction=0.046, pad=0.04)
        cbar.set_label("gridded value")
    # endregion

    # region Triangles
    triangles = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
    if len(triangles):
        ax.triplot(points.x, points.y, triangles, color="black", linewidth=0.6)
    # endregion

    # region Voronoi Overlay
    if voronoi is not None and len(voronoi):
        ax.add_collection(LineCollection(voronoi, colors="tab:blue", linewidths=0.8))
    # endregion

    c = points.z if points.has_z else "white"
    ax.scatter(points.x, points.y, c=c, s=18, edgecolors="black", cmap="viridis", zorder=3)

    # region Legend / Layout
    legend_elements = [
        Line2D([0], [0], color="black", lw=1, label="Triangle edge"),
        Line2D([0], [0], marker="o", color="w", label="Data point",
               markerfacecolor="white", markeredgecolor="black", markersize=7),
    ]
    if voronoi is not None and len(voronoi):
        legend_elements.append(Line2D([0], [0], color="tab:blue", lw=1, label="Voronoi edge"))
    if grid is not None:
        legend_elements.append(Patch(facecolor="white", edgecolor="black", label="Empty node"))
    ax.legend(handles=legend_elements, loc="lower right", fontsize=8, framealpha=0.85)
    ax.set_title(title)
    ax.set_aspect("equal")
    ax.autoscale_view()
    plt.tight_layout()
    if show:
        plt.show()
    return fig, ax
    # endregion
# endregion
