import matplotlib.pyplot as plt
import numpy as np

from MotorTransportTools.util.geometry import as_segment_array


def _figure_to_array(fig) -> np.ndarray:
    # If we haven't already shown or saved the plot, then we need to
    # draw the figure first.
    fig.canvas.draw()

    # Now we can save it to a numpy array.
    data = np.asarray(fig.canvas.buffer_rgba())[..., :3].copy()

    # Close the figure to remove it from the buffer
    plt.close(fig)
    return data


def _new_3d_axis(dpi: int):
    fig = plt.figure(figsize=(5, 5), dpi=dpi)
    ax = fig.add_subplot(projection='3d')
    return fig, ax


def plot_tube_network(network,
                      ax: plt.Axes = None,
                      dpi: int = 150,
                      as_np_array: bool = False,
                      color_by_tube: bool = True):
    """
    Draw every tube of a network as a 3D polyline.

    Args:
        network (TubeNetwork): The network
        ax (plt.Axes): A 3D axis to draw on. If None, a new figure is made.
        dpi (int): Resolution of a new figure
        as_np_array (bool): Return the new figure as an RGB array
        color_by_tube (bool): Give each tube its own color

    Returns:
        The figure, or the RGB array if as_np_array is set. Nothing is
        returned when drawing on a provided axis.
    """
    fig = None
    if ax is None:
        fig, ax = _new_3d_axis(dpi)

    segments = as_segment_array(network)
    seg_per_tube = network.seg_per_tube
    cmap = plt.get_cmap('tab10')
    for i, first in enumerate(range(0, len(segments), seg_per_tube)):
        tube = segments[first:first + seg_per_tube]
        chain = np.vstack([tube[:1, 0], tube[:, 1]])
        color = cmap(i % 10) if color_by_tube else 'tab:blue'
        ax.plot(chain[:, 0], chain[:, 1], chain[:, 2], color=color, lw=1)
    ax.set_xlabel('x (nm)')
    ax.set_ylabel('y (nm)')
    ax.set_zlabel('z (nm)')

    if fig is None:
        return
    if as_np_array:
        return _figure_to_array(fig)
    return fig


def plot_trajectory(positions: np.ndarray,
                    network=None,
                    destination=None,
                    ax: plt.Axes = None,
                    dpi: int = 150,
                    as_np_array: bool = False):
    """
    Draw a motor trajectory, optionally over its tube network and with the
    corners of its destination box marked.
    """
    fig = None
    if ax is None:
        fig, ax = _new_3d_axis(dpi)

    if network is not None:
        plot_tube_network(network, ax=ax, color_by_tube=False)

    positions = np.asarray(positions, dtype=float).reshape(-1, 3)
    ax.plot(positions[:, 0],
            positions[:, 1],
            positions[:, 2],
            color='tab:red',
            ls='--',
            lw=1.5)
    ax.scatter(*positions[0], color='tab:green', label='start')
    ax.scatter(*positions[-1], color='tab:red', label='end')

    if destination is not None:
        corners = np.asarray(destination, dtype=float).reshape(2, 3)
        ax.scatter(corners[:, 0],
                   corners[:, 1],
                   corners[:, 2],
                   color='k',
                   marker='s',
                   label='destination')
    ax.legend(loc='upper left')

    if fig is None:
        return
    if as_np_array:
        return _figure_to_array(fig)
    return fig


def plot_persistence_versus_entropy(data: np.ndarray,
                                    ax: plt.Axes = None,
                                    dpi: int = 150,
                                    as_np_array: bool = False):
    """
    Plot the structural entropy against persistence length, from rows of
    (persistence length, entropy).
    """
    fig = None
    if ax is None:
        fig = plt.figure(figsize=(5, 4), dpi=dpi)
        ax = fig.subplots()

    data = np.asarray(data, dtype=float).reshape(-1, 2)
    ax.plot(data[:, 0], data[:, 1], marker='o')
    ax.set_xlabel('persistence length (nm)')
    ax.set_ylabel('structural entropy')
    ax.grid(True)

    if fig is None:
        return
    plt.tight_layout()
    if as_np_array:
        return _figure_to_array(fig)
    return fig
