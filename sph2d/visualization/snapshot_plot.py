"""
Matplotlib figures of simulation state for headless runs.
"""

from typing import List, Optional

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
from matplotlib.patches import Rectangle

from ..core.config import SPHConfig
from ..core.diagnostics import SimulationDiagnostics
from ..core.particles import ParticleArrays


def create_snapshot_figure(particles: ParticleArrays, config: SPHConfig,
                           title: Optional[str] = None, color_by: str = 'density'):
    """Scatter plot of particle positions inside the domain.

    Args:
        particles: Particle data
        config: Simulation constants (domain size and boundary band)
        title: Axes title
        color_by: 'density', 'pressure', 'speed' or 'none'

    Returns:
        matplotlib Figure
    """
    width, height = config.domain_size
    fig, ax = plt.subplots(figsize=(8, 8))
    ax.set_xlim(0, width)
    ax.set_ylim(0, height)
    ax.set_aspect('equal')
    ax.set_xlabel('X')
    ax.set_ylabel('Y')

    # Boundary band
    eps = config.eps
    ax.add_patch(Rectangle((eps, eps), width - 2 * eps, height - 2 * eps,
                           fill=False, edgecolor='gray', linestyle='--', linewidth=1))

    if particles.n_particles > 0:
        if color_by == 'density':
            values = particles.density
        elif color_by == 'pressure':
            values = particles.pressure
        elif color_by == 'speed':
            values = np.sqrt(particles.velocity_x ** 2 + particles.velocity_y ** 2)
        else:
            values = None

        if values is None:
            ax.scatter(particles.position_x, particles.position_y, s=4, c='tab:blue')
        else:
            scatter = ax.scatter(particles.position_x, particles.position_y, s=4,
                                 c=values, cmap='viridis')
            plt.colorbar(scatter, ax=ax, label=color_by.title())

    ax.set_title(title or f"{particles.n_particles} particles")
    fig.tight_layout()
    return fig


def save_snapshot(particles: ParticleArrays, config: SPHConfig, path: str,
                  title: Optional[str] = None, color_by: str = 'density'):
    """Write a snapshot figure to ``path``."""
    fig = create_snapshot_figure(particles, config, title, color_by)
    fig.savefig(path, dpi=150, bbox_inches='tight')
    plt.close(fig)


def plot_diagnostics(history: List[SimulationDiagnostics], path: str):
    """Plot density range, max speed and kinetic energy against time.

    Args:
        history: Diagnostics collected during a run, in time order
        path: Output image path
    """
    time = np.array([d.time for d in history])
    min_rho = np.array([d.min_density for d in history])
    max_rho = np.array([d.max_density for d in history])
    mean_rho = np.array([d.mean_density for d in history])
    max_speed = np.array([d.max_speed for d in history])
    energy = np.array([d.kinetic_energy for d in history])

    fig, (ax1, ax2, ax3) = plt.subplots(3, 1, figsize=(10, 10), sharex=True)

    ax1.fill_between(time, min_rho, max_rho, alpha=0.3, label='min/max')
    ax1.plot(time, mean_rho, label='mean')
    ax1.set_ylabel('Density')
    ax1.legend()
    ax1.grid(True, alpha=0.3)

    ax2.plot(time, max_speed, color='tab:red')
    if history:
        ax2.axhline(history[-1].speed_limit, color='gray', linestyle='--', label='speed limit')
        ax2.legend()
    ax2.set_ylabel('Max speed')
    ax2.grid(True, alpha=0.3)

    ax3.plot(time, energy, color='tab:green')
    ax3.set_ylabel('Kinetic energy')
    ax3.set_xlabel('Time')
    ax3.grid(True, alpha=0.3)

    fig.tight_layout()
    fig.savefig(path, dpi=150, bbox_inches='tight')
    plt.close(fig)
