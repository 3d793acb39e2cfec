import matplotlib.pyplot as plt
import numpy as np


def plot_voronoi(diagram, ax=None, *, show_sites: bool = True):
    if ax is None:
        fig, ax = plt.subplots()

    for cell in diagram.iter_cells():
        p = np.vstack([cell.polygon, cell.polygon[:1]])
        ax.plot(*p.T, "-k", linewidth=0.8)

    if show_sites:
        ax.plot(*diagram.sites().T, ".r", markersize=3)

    b = diagram.boundary().vertices()
    b = np.vstack([b, b[:1]])
    ax.plot(*b.T, "-b", linewidth=1.5)

    ax.set_aspect("equal")
    ax.set_title("Voronoi (bounded)")
    return ax
