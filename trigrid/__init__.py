# trigrid: Delaunay triangulation, plane gridding and mesh export of scattered points
__version__ = "0.1.0"
