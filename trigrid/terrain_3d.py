# region Imports
import numpy as np
import pyvista as pv
from trigrid.grid import node_coords
# endregion


# region Builders
def grid_surface(grid, z_scale: float = 1.0):
    """StructuredGrid of the gridded values; empty nodes are NaN."""
    xs, ys = node_coords(grid.spec)
    xx, yy = np.meshgrid(xs, ys)
    zz = np.nan_to_num(grid.data, nan=np.nanmin(grid.data) if np.isfinite(grid.data).any() else 0.0)
    surf = pv.StructuredGrid(xx, yy, zz * z_scale)
    surf["value"] = grid.data.ravel(order="F")
    return surf


def mesh_polydata(points, triangles, z_scale: float = 1.0):
    """Triangulated surface as PolyData (flat when the points have no z)."""
    z = points.z if points.has_z else np.zeros(len(points))
    verts = np.column_stack([points.x, points.y, z * z_scale])
    tri = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
    faces = np.hstack([np.full((len(tri), 1), 3, dtype=np.int64), tri]).ravel()
    return pv.PolyData(verts, faces)
# endregion


# region 3D Plot
def plot_grid_3d(grid, points=None, triangles=None, z_scale: float = 1.0, title="trigrid surface"):
    """
    Render the gridded surface with an optional triangle wireframe overlay.
    Requires pyvista installed.
    """
    p = pv.Plotter()
    p.add_mesh(grid_surface(grid, z_scale), scalars="value", cmap="terrain",
               nan_color="gray", show_edges=False)
    p.add_scalar_bar(title="value")

    if points is not None and triangles is not None and len(triangles):
        p.add_mesh(mesh_polydata(points, triangles, z_scale), style="wireframe", color="white", line_width=1)

    p.add_axes()
    p.show_grid()
    p.set_background("black")
    p.add_text(title, color="white")
    p.show()
# endregion
